"""
Expo Push Dispatcher Utilities
==============================

Shared helper modules for the Lambda-hosted Expo push notification
dispatcher. It includes:

- logger.py          → structured JSON logging
- settings.py        → process configuration loaded from the environment
- errors.py          → error taxonomy and its HTTP mapping
- http.py            → API Gateway event parsing and JSON responses
- secrets.py         → SSM Parameter Store bulk read
- supabase_client.py → Supabase client builder and token query
- recipients.py      → scheduled / ad-hoc recipient sources
- expo_client.py     → authenticated Expo push client and message builder
- dispatch.py        → concurrent fan-out send and aggregation

Environment variables expected:
  • API_KEY                    - shared secret checked against x-api-key
  • SSM_PARAMETER_PATH         - Parameter Store path holding the secrets
  • AWS_REGION                 - AWS region for SSM (default: us-east-1)
  • USERS_TABLE                - Supabase table with push tokens (default: users)
  • PUSH_TOKEN_COLUMN          - token column name (default: push_token)
  • SCHEDULED_TITLE            - title for scheduled sends
  • SCHEDULED_BODY             - body for scheduled sends
  • MAX_SEND_WORKERS           - upper bound on concurrent sends (default: 16)
  • LOG_LEVEL                  - Log verbosity (default: INFO)

Nothing here holds state between invocations except process settings.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
