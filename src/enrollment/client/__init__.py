"""
Enrollment client.

The wizard state machine and the HTTP client it uses to reach the server.
"""

from enrollment.client.api import EnrollmentClient
from enrollment.client.wizard import NavigationOutcome, StepView, WizardStateMachine

__all__ = [
    "EnrollmentClient",
    "NavigationOutcome",
    "StepView",
    "WizardStateMachine",
]
