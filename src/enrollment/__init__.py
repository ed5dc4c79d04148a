"""
Enrollment - Multi-step onboarding wizard.

Collects identity, address and (for premium subscriptions) payment details
through a step wizard, validates every step on the server, and persists the
finished user/address/payment graph atomically.

Layers:
- rules / validation: declarative field rules and per-step validation
- submission: final re-validation and atomic create
- db: record repositories (in-memory, Supabase)
- web: FastAPI router for validate-step / create
- client: wizard state machine + HTTP client used by the terminal wizard
"""

__version__ = "1.0.0"
