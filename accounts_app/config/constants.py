# accounts_app/config/constants.py

# Constantes para a Senha (mesmo mínimo exigido pelo GoTrue)
PASSWORD_LENGTH_MIN = 6
PASSWORD_LENGTH_MAX = 72

# Constantes para o Nome Completo
FULL_NAME_LENGTH_MAX = 120

# Declaração da URL de Obtenção do Token
OAUTH2_SCHEME_TOKEN_URL = '/auth/login'
