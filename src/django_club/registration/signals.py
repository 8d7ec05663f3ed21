"""Custom signals for the registration app.

Signals:
    registration_activated: Sent when a checkout settlement activates a
        registration.
        Sender: The ``Registration`` class.
        Kwargs:
            registration: The ``Registration`` instance that was activated.
            subscription_id: The Stripe subscription id bound at settlement.
"""

from django.dispatch import Signal

registration_activated = Signal()
