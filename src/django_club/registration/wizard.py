"""Intake wizard state machine.

The guardian-facing registration form runs as four ordered steps. This module
models it without any UI: state is an immutable :class:`IntakeState` and every
transition is a pure function returning a new state, so step gates can be
checked (and tested) anywhere, including server-side before a submission is
accepted.

Usage::

    state = IntakeState()
    state = update_fields(state, first_name="Ama", last_name="Owusu", dob="2015-04-02")
    state = next_step(state)
    state = record_upload(state, UploadCategory.PHOTOS, "https://cdn.example/p.jpg")
    state = next_step(state)
    state = set_waiver_accepted(state, accepted=True, now=timezone.now())
    state = set_signature(state, "Kofi Owusu")
    state = next_step(state)
    payload = to_registration_data(state)
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from django_club.registration.uploads import UploadCategory

if TYPE_CHECKING:
    import datetime
    from collections.abc import Callable


class IntakeStep(enum.IntEnum):
    """Ordered wizard steps."""

    IDENTITY = 1
    DOCUMENTS = 2
    WAIVER = 3
    REVIEW = 4


class PhotoPolicy(enum.StrEnum):
    """What the documents step requires before the guardian may continue."""

    DOCUMENT = "document"
    PHOTO = "photo"
    EITHER = "either"


@dataclass(frozen=True, slots=True)
class IntakeData:
    """Every field the wizard collects, all held as submitted strings."""

    first_name: str = ""
    last_name: str = ""
    dob: str = ""
    gender: str = "Male"
    position: str = "TBD"
    jersey_size: str = "YM"
    medical_conditions: str = ""
    birth_cert_path: str = ""
    photo_url: str = ""
    waiver_signed_at: str = ""


@dataclass(frozen=True, slots=True)
class IntakeState:
    """Wizard position, collected data, typed signature, and inline error."""

    step: IntakeStep = IntakeStep.IDENTITY
    data: IntakeData = field(default_factory=IntakeData)
    signature: str = ""
    error: str | None = None


# ---------------------------------------------------------------------------
# Step gates
# ---------------------------------------------------------------------------


def is_identity_valid(data: IntakeData) -> bool:
    """Step 1: given name, family name and date of birth are all filled in."""
    return all(value.strip() for value in (data.first_name, data.last_name, data.dob))


def is_documents_valid(data: IntakeData, policy: PhotoPolicy = PhotoPolicy.PHOTO) -> bool:
    """Step 2: the upload required by ``policy`` has produced a URL."""
    if policy == PhotoPolicy.DOCUMENT:
        return bool(data.birth_cert_path)
    if policy == PhotoPolicy.EITHER:
        return bool(data.photo_url or data.birth_cert_path)
    return bool(data.photo_url)


def is_waiver_valid(state: IntakeState) -> bool:
    """Step 3: the waiver box is checked and a signature has been typed."""
    return bool(state.data.waiver_signed_at) and bool(state.signature.strip())


def is_step_valid(state: IntakeState, policy: PhotoPolicy = PhotoPolicy.PHOTO) -> bool:
    """Return whether the current step's gate is open. Review has no gate."""
    if state.step == IntakeStep.IDENTITY:
        return is_identity_valid(state.data)
    if state.step == IntakeStep.DOCUMENTS:
        return is_documents_valid(state.data, policy)
    if state.step == IntakeStep.WAIVER:
        return is_waiver_valid(state)
    return True


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def update_fields(state: IntakeState, **changes: str) -> IntakeState:
    """Return ``state`` with the given data fields replaced.

    Raises:
        TypeError: If a key is not an :class:`IntakeData` field.
    """
    return dataclasses.replace(state, data=dataclasses.replace(state.data, **changes))


def next_step(state: IntakeState, policy: PhotoPolicy = PhotoPolicy.PHOTO) -> IntakeState:
    """Advance one step when the current gate is open; otherwise stay put."""
    if state.step == IntakeStep.REVIEW or not is_step_valid(state, policy):
        return state
    return dataclasses.replace(state, step=IntakeStep(state.step + 1), error=None)


def previous_step(state: IntakeState) -> IntakeState:
    """Go back one step, stopping at the first."""
    if state.step == IntakeStep.IDENTITY:
        return state
    return dataclasses.replace(state, step=IntakeStep(state.step - 1), error=None)


def set_waiver_accepted(state: IntakeState, *, accepted: bool, now: datetime.datetime) -> IntakeState:
    """Check or uncheck the waiver box.

    Checking stamps ``now`` as ``waiver_signed_at``; unchecking clears it.
    """
    signed_at = now.isoformat() if accepted else ""
    return update_fields(state, waiver_signed_at=signed_at)


def set_signature(state: IntakeState, signature: str) -> IntakeState:
    """Record the typed signature."""
    return dataclasses.replace(state, signature=signature)


def record_upload(state: IntakeState, category: str, url: str | None) -> IntakeState:
    """Apply the outcome of an upload started from the documents step.

    A ``None`` URL means the upload failed: the field stays unset (so the step
    gate stays closed) and an inline error is recorded.
    """
    is_photo = category == UploadCategory.PHOTOS
    if url is None:
        what = "photo" if is_photo else "document"
        return dataclasses.replace(state, error=f"Failed to upload {what}. Please try again.")

    changes = {"photo_url": url} if is_photo else {"birth_cert_path": url}
    return dataclasses.replace(update_fields(state, **changes), error=None)


_ACTIONS: dict[str, Callable[..., IntakeState]] = {
    "update": lambda state, changes: update_fields(state, **changes),
    "next": lambda state, policy=PhotoPolicy.PHOTO: next_step(state, policy),
    "back": previous_step,
    "waiver": lambda state, accepted, now: set_waiver_accepted(state, accepted=accepted, now=now),
    "signature": set_signature,
    "upload": record_upload,
}


def reduce(state: IntakeState, action: tuple[object, ...]) -> IntakeState:
    """Apply a tagged action tuple such as ``("next",)`` or ``("signature", "Kofi")``.

    Raises:
        ValueError: If the action tag is unknown.
    """
    if not action:
        msg = "Empty wizard action"
        raise ValueError(msg)
    tag, *args = action
    handler = _ACTIONS.get(str(tag))
    if handler is None:
        msg = f"Unknown wizard action {tag!r}"
        raise ValueError(msg)
    return handler(state, *args)


def to_registration_data(state: IntakeState, policy: PhotoPolicy = PhotoPolicy.PHOTO) -> dict[str, str]:
    """Package the collected fields as the ``registrationData`` submission.

    Raises:
        ValueError: If the wizard is not on the review step or a gate is closed.
    """
    if state.step != IntakeStep.REVIEW:
        msg = "Registration can only be submitted from the review step"
        raise ValueError(msg)
    if not (is_identity_valid(state.data) and is_documents_valid(state.data, policy) and is_waiver_valid(state)):
        msg = "Registration has incomplete steps"
        raise ValueError(msg)

    payload = dataclasses.asdict(state.data)
    payload["signature"] = state.signature.strip()
    return payload
