# =============================================================================
# tests/test_registry.py - Capability Registry Tests
# =============================================================================
# Run with: pytest tests/test_registry.py -v
# =============================================================================

import pytest

from core.registry import (
    CapabilityRegistry,
    MissingCapabilityError,
    RegistryFrozenError,
    StartupError,
    describe_key,
)


class Widget:
    pass


class TestCapabilityRegistry:
    """Tests for registration, lookup and freezing."""

    def test_register_and_get(self):
        registry = CapabilityRegistry()
        widget = Widget()

        registry.register(Widget, widget)

        assert registry.get(Widget) is widget
        assert Widget in registry
        assert len(registry) == 1
        assert registry.keys() == [Widget]

    def test_string_keys(self):
        registry = CapabilityRegistry()
        registry.register("CorsPolicy", {"origins": []})

        assert registry.get("CorsPolicy") == {"origins": []}

    def test_missing_capability(self):
        registry = CapabilityRegistry()

        with pytest.raises(MissingCapabilityError) as exc_info:
            registry.get(Widget)

        assert exc_info.value.key is Widget
        assert "Widget" in str(exc_info.value)

    def test_duplicate_registration_is_rejected(self):
        registry = CapabilityRegistry()
        registry.register(Widget, Widget())

        with pytest.raises(StartupError, match="already registered"):
            registry.register(Widget, Widget())

    def test_frozen_registry_rejects_registration(self):
        registry = CapabilityRegistry()
        registry.register(Widget, Widget())
        registry.freeze()

        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register("late", object())

        # Lookups still work after freezing
        assert isinstance(registry.get(Widget), Widget)

    def test_freeze_is_idempotent(self):
        registry = CapabilityRegistry()
        registry.freeze()
        registry.freeze()

        assert registry.frozen


class TestMissingCapabilityError:
    """The error message names the step and the capability."""

    def test_message_with_step(self):
        error = MissingCapabilityError(Widget, step="routing")

        assert error.step == "routing"
        assert "'routing'" in str(error)
        assert "'Widget'" in str(error)

    def test_is_a_startup_error(self):
        assert isinstance(MissingCapabilityError("x"), StartupError)

    def test_describe_key(self):
        assert describe_key(Widget) == "Widget"
        assert describe_key("named") == "named"
