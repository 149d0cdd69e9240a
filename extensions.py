from backoffice.api_client import ApiClient
from backoffice.auth import session_token

# Shared backend client; bound to the app in create_app() via api.init_app(app)
api = ApiClient(token_getter=session_token)
