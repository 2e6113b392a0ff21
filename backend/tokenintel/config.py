"""
Configuration module for the tokenintel backend application.
Contains environment variables and other configuration settings.
"""
import os
from dotenv import load_dotenv
from typing import List

# Load environment variables
load_dotenv()


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


# API Keys
HELIUS_API_KEY = os.getenv('HELIUS_API_KEY', '')
TWITTER_API_KEY = os.getenv('TWITTER_API_KEY', '')
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')

# RPC Configuration
SOLANA_RPC_URLS = _split(os.getenv('SOLANA_RPC_URLS', 'https://api.mainnet-beta.solana.com'))
if HELIUS_API_KEY:
    SOLANA_RPC_URLS.insert(0, f"https://mainnet.helius-rpc.com/?api-key={HELIUS_API_KEY}")

HTTP_TIMEOUT = float(os.getenv('HTTP_TIMEOUT', '30.0'))  # seconds
FALLBACK_MAX_CYCLES = int(os.getenv('FALLBACK_MAX_CYCLES', '3'))

# Pump.fun
PUMP_API_BASE_URL = os.getenv('PUMP_API_BASE_URL', 'https://frontend-api-v3.pump.fun')
PUMP_TRADES_PAGE_SIZE = 200
PUMP_TRADES_MINIMUM_SIZE = 10000  # lamports
PUMP_TRADES_PAGE_DELAY = 0.3  # seconds

# Price feeds
COINGECKO_PRICE_URL = os.getenv(
    'COINGECKO_PRICE_URL',
    'https://api.coingecko.com/api/v3/simple/price?ids=solana&vs_currencies=usd',
)
JUPITER_PRICE_URL = os.getenv(
    'JUPITER_PRICE_URL',
    'https://api.jup.ag/price/v2?ids=So11111111111111111111111111111111111111112',
)

# Social search
TWITTER_SEARCH_URL = os.getenv(
    'TWITTER_SEARCH_URL', 'https://api.twitterapi.io/twitter/tweet/advanced_search'
)
TWITTER_REQUEST_DELAY = float(os.getenv('TWITTER_REQUEST_DELAY', '0.2'))  # seconds
TWITTER_MAX_RETRIES = int(os.getenv('TWITTER_MAX_RETRIES', '3'))
TWITTER_TWEET_LIMIT = int(os.getenv('TWITTER_TWEET_LIMIT', '20'))
IGNORED_TWITTER_ACCOUNTS = _split(os.getenv('IGNORED_TWITTER_ACCOUNTS', 'pumpdotfun'))

# LLM
OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')

# Storage
CHAT_DB_FILE = os.getenv('CHAT_DB_FILE', 'tokenintel_chats.db')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
CORS_ORIGINS = _split(os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://localhost:5173'))


class Config:
    """
    Configuration class for application settings.
    """
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')

    # API Settings
    API_VERSION = "1.0.0"
    API_TITLE = "TokenIntel API"
    API_DESCRIPTION = "Pump.fun and Solana token intelligence and research API"

    # RPC Settings
    RPC_URLS = SOLANA_RPC_URLS
    FALLBACK_MAX_CYCLES = FALLBACK_MAX_CYCLES
    HTTP_TIMEOUT = HTTP_TIMEOUT

    # External APIs
    PUMP_API_BASE_URL = PUMP_API_BASE_URL
    TWITTER_SEARCH_URL = TWITTER_SEARCH_URL
