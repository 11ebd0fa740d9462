import logging
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

# Classe de configuration utilisant Pydantic BaseSettings
class Settings(BaseSettings):
    # --- Base de Données (commandes / suivi) ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./eesha.db"
    DB_ECHO_LOG: bool = False

    # --- Stockage local (panier sur l'appareil) ---
    LOCAL_STORAGE_URL: str = "sqlite:///./eesha_local.db"
    CART_STORAGE_KEY: str = "cart_items"

    # --- Politique tarifaire (France) ---
    VAT_RATE: Decimal = Decimal("0.20") # TVA française 20%
    SHIPPING_FLAT_RATE: Decimal = Decimal("10.00") # Forfait livraison France
    FREE_SHIPPING_THRESHOLD: Optional[Decimal] = Decimal("100.00") # Livraison offerte au-delà
    CURRENCY: str = "EUR"

    # --- Commandes ---
    ORDER_NUMBER_PREFIX: str = "ES"
    DEFAULT_TRACKING_LOCATION: str = "Paris, France"

    # --- Paiement ---
    PAYMENT_API_URL: str = "http://localhost:8000"
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    MERCHANT_DISPLAY_NAME: str = "Eesha Silks"

    # --- Authentification (token émis par le service d'auth hébergé) ---
    AUTH_JWT_SECRET: str = "remplacer_par_le_secret_jwt_du_projet"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = None

    # --- Messages Génériques ---
    CART_ERROR_MSG: str = "Impossible de mettre à jour le panier."
    ORDER_ERROR_MSG: str = "Impossible de passer la commande."
    EMPTY_CART_MSG: str = "Votre panier est vide."
    AUTH_REQUIRED_MSG: str = "Vous devez être connecté pour effectuer cette action."
    INVALID_INPUT_MSG: str = "Certaines informations saisies sont invalides."
    ORDER_NOT_FOUND_MSG: str = "Commande introuvable."
    ORDER_UPDATE_ERROR_MSG: str = "Impossible de mettre à jour la commande."
    TRACKING_ERROR_MSG: str = "Le suivi de la commande n'a pas pu être mis à jour."
    PAYMENT_FAILED_MSG: str = "Le paiement a échoué. Veuillez réessayer."

    class Config:
        # Charger depuis les variables d'environnement (respecte load_dotenv)
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore' # Ignorer les variables d'env non définies dans le modèle

# Instancier la classe de configuration
settings = Settings()

if settings.AUTH_JWT_SECRET == "remplacer_par_le_secret_jwt_du_projet":
    logger.warning("La variable AUTH_JWT_SECRET utilise la valeur par défaut. Définir le secret JWT du projet.")

logger.debug(f"Configuration chargée: DB={settings.DATABASE_URL}, TVA={settings.VAT_RATE}, Livraison={settings.SHIPPING_FLAT_RATE} {settings.CURRENCY}")
