"""Outbound report state and encoder.

``ReportEncoder`` owns the pressed-key state of the emulated device and
turns press/release calls into complete reports. Every call that changes
state returns the full report to send; the caller hands it to a
transport. Failed calls leave the state untouched and return no report.

Example::

    encoder = ReportEncoder(REMOTE_PROFILE)
    result = encoder.press("shift")
    result = encoder.press("a")
    for report in result.reports:
        transport_bytes = bytes([report.report_id]) + report.payload
"""

from __future__ import annotations

import logging

from hidremote.domain.models import (
    ConsumerLayout,
    ConsumerState,
    EncodeError,
    EncodeResult,
    KeyboardState,
    OutboundReport,
    ReportKind,
)
from hidremote.hid.descriptor import parse_descriptor
from hidremote.hid.keymap import ResolvedKey, key_stroke, resolve_key
from hidremote.hid.profiles import REMOTE_PROFILE, DeviceProfile

logger = logging.getLogger(__name__)

KEYBOARD_REPORT_LENGTH: int = 8


class ReportEncoder:
    """Stateful keyboard and consumer-control report encoder.

    The consumer report width is taken from the profile's descriptor:
    the Input bits declared for the consumer report ID, rounded up to
    whole bytes.
    """

    def __init__(self, profile: DeviceProfile = REMOTE_PROFILE) -> None:
        self._profile = profile
        self._descriptor = parse_descriptor(profile.descriptor)
        length = self._descriptor.report_length(profile.consumer_report_id, ReportKind.INPUT)
        if length == 0:
            length = 2 * profile.consumer_slots
            logger.warning(
                "Profile %s declares no input report %d; using %d byte consumer reports",
                profile.key, profile.consumer_report_id, length,
            )
        self._consumer_length = length
        self._keyboard = KeyboardState()
        self._consumer = self._empty_consumer()
        logger.debug(
            "Encoder ready for profile %s (consumer report %d bytes, %s)",
            profile.key, self._consumer_length, profile.consumer_layout.value,
        )

    @property
    def profile(self) -> DeviceProfile:
        return self._profile

    @property
    def consumer_report_length(self) -> int:
        return self._consumer_length

    @property
    def keyboard_state(self) -> KeyboardState:
        """Snapshot of the keyboard state."""
        return self._keyboard.model_copy(deep=True)

    @property
    def consumer_state(self) -> ConsumerState:
        """Snapshot of the consumer state."""
        return self._consumer.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def keyboard_report(self) -> OutboundReport:
        return OutboundReport(
            report_id=self._profile.keyboard_report_id,
            payload=self._keyboard.to_bytes(),
        )

    def consumer_report(self) -> OutboundReport:
        return OutboundReport(
            report_id=self._profile.consumer_report_id,
            payload=self._consumer.to_bytes(self._consumer_length),
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def press(self, token: str) -> EncodeResult:
        """Add a key to the pressed state and emit the affected report."""
        key = resolve_key(token, self._profile.media_keys)
        if key is None:
            return self._unresolved(token)
        if key.consumer:
            return self._press_consumer(key)
        return self._press_keyboard(key)

    def release(self, token: str) -> EncodeResult:
        """Remove a key from the pressed state and emit the affected report."""
        key = resolve_key(token, self._profile.media_keys)
        if key is None:
            return self._unresolved(token)
        if key.consumer:
            return self._release_consumer(key)
        return self._release_keyboard(key)

    def release_all(self) -> EncodeResult:
        """Clear both states and emit both reports."""
        self.reset()
        logger.debug("Released all keys")
        return EncodeResult(
            ok=True,
            reports=[self.keyboard_report(), self.consumer_report()],
            message="released all keys",
        )

    def tap(self, token: str) -> EncodeResult:
        """Press then release ``token``; reports of both steps in order."""
        pressed = self.press(token)
        if not pressed.ok:
            return pressed
        released = self.release(token)
        if not released.ok:
            return released
        return EncodeResult(
            ok=True,
            reports=[*pressed.reports, *released.reports],
            message=f"tapped {token!r}",
        )

    def reset(self) -> None:
        """Forget all pressed keys without emitting anything."""
        self._keyboard = KeyboardState()
        self._consumer = self._empty_consumer()

    def checkpoint(self) -> tuple[KeyboardState, ConsumerState]:
        """Copy of both states, for ``rollback`` when a report never left."""
        return self.keyboard_state, self.consumer_state

    def rollback(self, checkpoint: tuple[KeyboardState, ConsumerState]) -> None:
        """Restore the states saved by ``checkpoint``."""
        keyboard, consumer = checkpoint
        self._keyboard = keyboard.model_copy(deep=True)
        self._consumer = consumer.model_copy(deep=True)
        logger.debug("Encoder state rolled back")

    # ------------------------------------------------------------------
    # Keyboard path
    # ------------------------------------------------------------------

    def _press_keyboard(self, key: ResolvedKey) -> EncodeResult:
        stroke = key_stroke(key.value)
        if stroke is None:
            return self._unresolved(key.token)

        state = self._keyboard.model_copy(deep=True)
        if not stroke.keycode:
            state.held_modifiers |= stroke.modifiers
        else:
            if stroke.keycode not in state.keys:
                try:
                    slot = state.keys.index(0)
                except ValueError:
                    logger.warning("Cannot press %r: all 6 key slots in use", key.token)
                    return EncodeResult(
                        ok=False,
                        error=EncodeError.SLOT_EXHAUSTED,
                        message=f"all key slots in use, cannot press {key.token!r}",
                    )
                state.keys[slot] = stroke.keycode
            if stroke.modifiers:
                implicit = state.implicit_modifiers.get(stroke.keycode, 0)
                state.implicit_modifiers[stroke.keycode] = implicit | stroke.modifiers
        state.update_modifiers()

        self._keyboard = state
        logger.debug("Pressed %r -> %s", key.token, state.to_bytes().hex(" "))
        return EncodeResult(
            ok=True, reports=[self.keyboard_report()], message=f"pressed {key.token!r}"
        )

    def _release_keyboard(self, key: ResolvedKey) -> EncodeResult:
        stroke = key_stroke(key.value)
        if stroke is None:
            return self._unresolved(key.token)

        state = self._keyboard
        if not stroke.keycode:
            state.held_modifiers &= ~stroke.modifiers & 0xFF
        else:
            # Only the shift this key added itself; a held Shift key stays down
            state.implicit_modifiers.pop(stroke.keycode, None)
            state.keys = [0 if k == stroke.keycode else k for k in state.keys]
        state.update_modifiers()
        logger.debug("Released %r -> %s", key.token, state.to_bytes().hex(" "))
        return EncodeResult(
            ok=True, reports=[self.keyboard_report()], message=f"released {key.token!r}"
        )

    # ------------------------------------------------------------------
    # Consumer path
    # ------------------------------------------------------------------

    def _press_consumer(self, key: ResolvedKey) -> EncodeResult:
        state = self._consumer
        if state.layout == ConsumerLayout.BITMASK:
            state.slots[0] |= key.value
        elif key.value not in state.slots:
            try:
                slot = state.slots.index(0)
            except ValueError:
                logger.warning("Cannot press %r: consumer slots in use", key.token)
                return EncodeResult(
                    ok=False,
                    error=EncodeError.SLOT_EXHAUSTED,
                    message=f"all consumer slots in use, cannot press {key.token!r}",
                )
            state.slots[slot] = key.value
        logger.debug("Pressed media key %r (0x%04x)", key.token, key.value)
        return EncodeResult(
            ok=True, reports=[self.consumer_report()], message=f"pressed {key.token!r}"
        )

    def _release_consumer(self, key: ResolvedKey) -> EncodeResult:
        state = self._consumer
        if state.layout == ConsumerLayout.BITMASK:
            state.slots[0] &= ~key.value & 0xFFFF
        else:
            state.slots = [0 if s == key.value else s for s in state.slots]
        logger.debug("Released media key %r (0x%04x)", key.token, key.value)
        return EncodeResult(
            ok=True, reports=[self.consumer_report()], message=f"released {key.token!r}"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _empty_consumer(self) -> ConsumerState:
        return ConsumerState(
            layout=self._profile.consumer_layout,
            slots=[0] * self._profile.consumer_slots,
        )

    @staticmethod
    def _unresolved(token: str) -> EncodeResult:
        logger.warning("Unresolved key token: %r", token)
        return EncodeResult(
            ok=False,
            error=EncodeError.UNRESOLVED_KEY,
            message=f"unknown key {token!r}",
        )
