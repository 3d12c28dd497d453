"""Keyboard-driven verification."""

from speech_collector.services.verification.cycler import KeyAction, VerificationCycler

__all__ = ["KeyAction", "VerificationCycler"]
