MIN_SIMILARITY_THRESHOLD = 30
TIP_SCORE_THRESHOLD = 70
SUPPORTED_LANGUAGES = {
    'hindi': {'name': 'Hindi', 'script': 'Devanagari'},
    'kannada': {'name': 'Kannada', 'script': 'Kannada'},
}
AVAILABLE_MODELS = ('gemini-2.5-pro', 'gemini-2.5-flash', 'gemini-2.5-flash-lite')
DEFAULT_MODEL = 'gemini-2.5-flash'
