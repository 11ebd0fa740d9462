"""
Eesha - Moteur panier et commandes (calcul TVA / livraison, fusion par variante, suivi).
"""

__version__ = "1.0.0"
