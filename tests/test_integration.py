"""Integration tests for complete form lifecycles.

Tests cover end-to-end scenarios combining:
- Form creation and option handling
- Registration through binding descriptors
- Mode-driven validation
- Submission success and failure
- Lazy unregistration
- Observation through the event emitter
"""

import pytest

from formstate import FormConfigError, create_form
from formstate.config import FormOptions
from formstate.events import EventEmitter
from formstate.types import FormEventType

from tests.fakes import FakeElement, FakeInputEvent


class TestChangeModeScenario:
    """Typing into a field validated on change."""

    @pytest.mark.asyncio
    async def test_typing_then_blurring(self):
        """Should validate while typing and ignore blur in change mode."""
        form = create_form({"mode": "onChange"})
        username = form.register("username", {"minLength": 6})
        validated = []
        form.emitter.on(FormEventType.FIELD_VALIDATED, validated.append)

        await username.on_input(FakeInputEvent("ab"))
        assert form.form_state.get_error("username").type == "minLength"
        assert len(validated) == 1

        await username.on_blur()
        assert len(validated) == 1
        assert form.form_state.get_error("username") is not None

        await username.on_input(FakeInputEvent("abcdef"))
        assert form.form_state.get_error("username") is None
        assert form.form_state.is_valid is True

    @pytest.mark.asyncio
    async def test_is_valid_waits_for_every_field(self):
        """Should become valid only once every field passes."""
        form = create_form({"mode": "onChange"})
        username = form.register("username", {"minLength": 6})
        email = form.register("email", {"required": True})

        await email.on_input(FakeInputEvent(""))
        await username.on_input(FakeInputEvent("abcdef"))
        assert form.form_state.is_valid is False

        await email.on_input(FakeInputEvent("a@b.c"))
        assert form.form_state.is_valid is True


class TestSubmitModeScenario:
    """Submitting an empty form whose fields are all required."""

    @pytest.mark.asyncio
    async def test_empty_submit(self):
        """Should report every required field when submitting an empty form."""
        form = create_form({"mode": "onSubmit"})
        for name in ("first", "last", "email"):
            form.register(name, {"required": True})
        submitted = []
        failures = []

        submit = form.handle_submit(
            lambda values, event: submitted.append(values),
            lambda errors, event: failures.append(errors),
        )
        await submit()

        assert submitted == []
        assert len(failures) == 1
        assert set(failures[0]) == {"first", "last", "email"}
        assert set(form.form_state.errors) == {"first", "last", "email"}
        assert form.form_state.is_submitted is True
        assert form.form_state.is_submit_successful is False

    @pytest.mark.asyncio
    async def test_revalidates_on_change_after_submit(self):
        """Should switch to change validation after the first submit."""
        form = create_form({"mode": "onSubmit", "reValidateMode": "onChange"})
        name = form.register("name", {"required": True})

        await name.on_input(FakeInputEvent(""))
        assert form.form_state.errors == {}

        await form.handle_submit(lambda v, e: None)()
        assert form.form_state.get_error("name") is not None

        await name.on_input(FakeInputEvent("Ada"))
        assert form.form_state.get_error("name") is None
        assert form.form_state.is_valid is True


class TestSuccessfulSubmitScenario:
    """Submitting a form whose rules all pass."""

    @pytest.mark.asyncio
    async def test_successful_submit(self):
        """Should submit the values of a form whose rules all pass."""
        form = create_form({"defaultValues": {"name": "Ada"}})
        form.register("name", {"required": True})
        form.register("age", {"validate": lambda v: int(v) >= 18 or "Adults only", "value": "36"})
        calls = []

        submit = form.handle_submit(lambda values, event: calls.append(values))
        await submit()

        assert calls == [{"name": "Ada", "age": "36"}]
        assert form.form_state.is_submit_successful is True
        assert form.form_state.submit_count == 1


class TestFormProperties:
    """Properties that hold across the whole form."""

    def test_register_twice_does_not_reset_value(self):
        """Should keep the value when a field is registered twice."""
        form = create_form()
        form.register("name", {"value": "Ada"})
        form.register("name")
        assert form.fields["name"].input_value == "Ada"

    @pytest.mark.asyncio
    async def test_unregister_is_lazy(self):
        """Should keep an unregistered field until the next validation."""
        form = create_form()
        form.register("x", {"required": True})
        form.unregister("x")

        assert "x" in form.fields

        await form.trigger()

        assert "x" not in form.fields
        assert form.form_state.errors == {}

    @pytest.mark.asyncio
    async def test_dirty_round_trip(self):
        """Should clear dirty state when the value returns to its default."""
        form = create_form({"defaultValues": {"name": "Ada"}})
        name = form.register("name")

        await name.on_input(FakeInputEvent("Grace"))
        assert form.form_state.dirty_fields == frozenset({"name"})
        assert form.form_state.is_dirty is True

        await name.on_input(FakeInputEvent("Ada"))
        assert form.form_state.dirty_fields == frozenset()
        assert form.form_state.is_dirty is False

    @pytest.mark.asyncio
    async def test_errors_only_for_registered_fields(self):
        """Should only hold errors for registered fields."""
        form = create_form({"mode": "onChange"})
        a = form.register("a", {"required": True})
        form.register("b", {"required": True})
        await a.on_input(FakeInputEvent(""))
        form.unregister("a")

        await form.trigger("b")

        assert set(form.form_state.errors) == {"b"}
        assert set(form.form_state.errors) <= set(form.fields)

    @pytest.mark.asyncio
    async def test_submit_count_never_decreases(self):
        """Should increase the submit count with every submit."""
        form = create_form()
        form.register("name", {"required": True})
        counts = []
        for _ in range(3):
            await form.handle_submit(lambda v, e: None)()
            counts.append(form.form_state.submit_count)
        assert counts == [1, 2, 3]


class TestUseRegister:
    """Deferred registration factories."""

    def test_factory_registers_lazily(self):
        """Should register only when the factory is called."""
        form = create_form()
        factory = form.use_register("name", {"required": True, "value": "Ada"})
        assert "name" not in form.fields

        binding = factory()

        assert binding.model_value == "Ada"
        assert form.fields["name"].rule == {"required": True}

    def test_repeated_factory_calls_keep_typed_value(self):
        """Should keep the typed value across factory calls."""
        form = create_form()
        factory = form.use_register("name", {"value": "Ada"})
        factory()
        form.fields["name"].input_value = "Grace"

        factory()

        assert form.fields["name"].input_value == "Grace"


class TestTrigger:
    """Validating on demand."""

    @pytest.mark.asyncio
    async def test_trigger_single_field(self):
        """Should validate a single field on demand."""
        form = create_form()
        form.register("a", {"required": True})
        form.register("b", {"required": True, "value": "x"})

        assert await form.trigger("a") is False
        assert await form.trigger("b") is True
        assert set(form.form_state.errors) == {"a"}

    @pytest.mark.asyncio
    async def test_trigger_all(self):
        """Should validate the whole form on demand."""
        form = create_form()
        form.register("a", {"value": "x"})
        assert await form.trigger() is True

    @pytest.mark.asyncio
    async def test_trigger_unknown_field(self):
        """Should leave is_valid alone when triggering an unknown field."""
        form = create_form()
        seen = []
        form.form_state.subscribe(seen.append)

        assert await form.trigger("ghost") is False

        assert form.form_state.is_valid is False
        assert seen == []

    @pytest.mark.asyncio
    async def test_trigger_pending_field(self):
        """Should not validate a field pending removal."""
        form = create_form()
        form.register("a", {"required": True})
        form.unregister("a")

        assert await form.trigger("a") is False

        assert form.form_state.errors == {}
        assert form.form_state.is_valid is False


class TestCreateForm:
    """Form construction."""

    def test_keyword_options(self):
        """Should accept snake_case keyword options."""
        form = create_form(mode="onBlur", criteria_mode="all")
        assert form.options.mode.value == "onBlur"
        assert form.options.display_all_errors is True

    def test_options_instance(self):
        """Should use a FormOptions instance as given."""
        options = FormOptions.from_dict({"mode": "onChange"})
        assert create_form(options).options is options

    def test_dict_and_keywords_rejected(self):
        """Should reject a dict combined with keyword options."""
        with pytest.raises(TypeError):
            create_form({"mode": "onChange"}, criteria_mode="all")

    def test_options_instance_and_keywords_rejected(self):
        """Should reject a FormOptions instance combined with keyword options."""
        options = FormOptions.from_dict({"mode": "onChange"})
        with pytest.raises(TypeError):
            create_form(options, criteria_mode="all")

    def test_invalid_options(self):
        """Should raise FormConfigError for invalid options."""
        with pytest.raises(FormConfigError):
            create_form({"mode": "whenever"})

    def test_forms_are_independent(self):
        """Should keep the state of separate forms apart."""
        first = create_form()
        second = create_form()
        first.register("name")
        first.handle_submit(lambda v, e: None)

        assert "name" not in second.fields
        assert second.form_state.submit_count == 0

    @pytest.mark.asyncio
    async def test_shared_emitter_receives_events(self):
        """Should publish form events on a shared emitter."""
        emitter = EventEmitter()
        form = create_form({"mode": "onChange"}, emitter=emitter)
        seen = []
        emitter.on_any(lambda e: seen.append(e.type))

        name = form.register("name", {"required": True})
        await name.on_input(FakeInputEvent(""))

        assert FormEventType.FIELD_REGISTERED in seen
        assert FormEventType.FIELD_VALIDATED in seen


class TestFocusOnErrorScenario:
    """The failing input receives focus."""

    @pytest.mark.asyncio
    async def test_component_wrapped_input_is_focused(self):
        """Should focus the input wrapped inside a component."""
        form = create_form({"mode": "onBlur"})
        binding = form.register("name", {"required": True})
        inner = FakeElement("INPUT")
        binding.ref.value = FakeElement("DIV", [inner])

        await binding.on_blur()

        assert inner.focus_calls == 1

    @pytest.mark.asyncio
    async def test_focus_disabled(self):
        """Should attach the element without focusing it when focus is disabled."""
        form = create_form({"mode": "onBlur", "shouldFocusError": False})
        binding = form.register("name", {"required": True})
        inner = FakeElement("INPUT")
        binding.ref.value = inner

        await binding.on_blur()

        assert inner.focus_calls == 0
        assert form.form_state.get_error("name").ref is inner
