"""
Action lifecycle: steps, availability, response resolution, controller
proxies and helpers.
"""

import pytest

from classaction import (
    Action,
    ActionNotAvailableFault,
    ActionState,
    NoActiveActionFault,
    helper_method,
    responds_to,
    responds_to_any,
    responds_with,
)
from classaction.templates import ViewContext

from support import FakeController, run_respond_block


# ============================================================================
# Step discovery
# ============================================================================

class StepsAction(Action):

    def method1(self):
        pass

    def method2(self):
        pass

    def _private(self):
        pass

    def with_argument(self, value):
        pass

    @property
    def computed(self):
        return 1

    @responds_to("html")
    def html_block(self):
        pass

    @helper_method
    def title(self):
        return "title"


class ChildStepsAction(StepsAction):

    def method3(self):
        pass

    def method1(self):
        pass


class TestActionMethods:

    def test_public_zero_argument_methods_in_order(self):
        assert StepsAction.action_methods() == ["method1", "method2"]

    def test_inherited_steps_come_first(self):
        assert ChildStepsAction.action_methods() == ["method1", "method2", "method3"]

    def test_override_of_decorated_method_is_not_a_step(self):
        class Overriding(StepsAction):
            def html_block(self):
                pass

        assert Overriding.action_methods() == ["method1", "method2"]

    def test_base_class_has_no_steps(self):
        assert Action.action_methods() == []

    def test_available_is_not_a_step(self):
        class WithAvailability(Action):
            def available(self):
                return True

            def run(self):
                pass

        assert WithAvailability.action_methods() == ["run"]


# ============================================================================
# Execution
# ============================================================================

class TestExecute:

    def test_available_by_default(self, controller):
        assert StepsAction(controller).available() is True

    def test_runs_steps_in_order(self, controller):
        calls = []

        class Ordered(Action):
            def first(self):
                calls.append("first")

            def second(self):
                calls.append("second")

        action = Ordered(controller)
        action._execute()

        assert calls == ["first", "second"]
        assert action.phase == ActionState.DONE

    def test_unavailable_action_raises(self, controller):
        class Unavailable(Action):
            def available(self):
                return False

            def step(self):
                raise AssertionError("must not run")

        action = Unavailable(controller)
        with pytest.raises(ActionNotAvailableFault) as info:
            action._execute()

        assert info.value.code == "ACTION_NOT_AVAILABLE"
        assert action.phase == ActionState.IDLE
        assert controller.calls == []

    def test_stops_after_response_body(self, controller):
        calls = []

        class Redirecting(Action):
            def first(self):
                calls.append("first")
                self.controller.response_body = "redirected"

            def second(self):
                calls.append("second")

        Redirecting.add_response("anything")
        Redirecting(controller)._execute()

        assert calls == ["first"]
        assert controller.calls == []

    def test_snapshot_of_controller_assigns(self):
        controller = FakeController(post="post", _hidden="x")

        action = StepsAction(controller)

        assert action.post == "post"
        assert not hasattr(action, "_hidden")

    def test_assigns_copied_to_controller_before_responding(self, controller):
        class Loader(Action):
            def load(self):
                self.post = "loaded"

        Loader(controller)._execute()

        assert controller.post == "loaded"


# ============================================================================
# Response resolution
# ============================================================================

class TestRespond:

    def test_respond_with_assign(self, controller):
        class Show(Action):
            def load(self):
                self.post = "post"

        Show.add_response("post")
        Show(controller)._execute()

        assert controller.calls == [("respond_with", "post", None)]

    def test_respond_with_method(self, controller):
        class Show(Action):
            @responds_with()
            def resource(self):
                return {"id": 1}

        Show(controller)._execute()

        assert controller.calls == [("respond_with", {"id": 1}, None)]

    def test_guarded_response_preferred(self, controller):
        class Update(Action):
            def save(self):
                self.post = "post"
                self.errors = ["invalid"]

            @property
            def invalid(self):
                return bool(self.errors)

        Update.add_response("post")
        Update.add_response("errors", on="invalid")
        Update(controller)._execute()

        assert controller.calls == [("respond_with", ["invalid"], None)]

    def test_guard_method(self, controller):
        class Update(Action):
            def save(self):
                self.post = "post"

            def _invalid(self):
                return False

        Update.add_response("errors", on="_invalid")
        Update.add_response("post")
        Update(controller)._execute()

        assert controller.calls == [("respond_with", "post", None)]

    def test_no_rules_no_response(self, controller):
        class Silent(Action):
            def step(self):
                pass

        Silent(controller)._execute()

        assert controller.calls == []

    def test_format_block_without_response_uses_respond_to(self, controller):
        class Export(Action):
            @responds_to("csv")
            def export(self):
                self.exported = True

        Export(controller)._execute()

        assert len(controller.calls) == 1
        kind, block = controller.calls[0]
        assert kind == "respond_to"

        collector = run_respond_block(block)
        assert collector.formats == ["csv"]

    def test_format_rules_without_blocks_add_nothing(self, controller):
        class Show(Action):
            def load(self):
                self.post = "post"

        Show.add_response("post")
        Show.add_format("html", "json")
        Show(controller)._execute()

        assert controller.calls == [("respond_with", "post", None)]

    def test_response_block_selects_guarded_formats(self, controller):
        class Update(Action):
            def save(self):
                self.post = "post"
                self.failed = True

            @responds_to("html", on="_failed")
            def rerender(self):
                self.rerendered = True

            @responds_to("html")
            def redirect(self):
                self.redirected = True

            def _failed(self):
                return self.failed

        Update.add_response("post")
        Update(controller)._execute()

        _, resource, block = controller.calls[0]
        assert resource == "post"

        collector = run_respond_block(block)
        collector.block_for("html")()

        assert controller.rerendered is True
        assert not hasattr(controller, "redirected")

    def test_format_block_assigns_reach_controller(self, controller):
        class Show(Action):
            def load(self):
                self.count = 1

            @responds_to("json")
            def as_json(self):
                self.count += 1

        Show.add_response("count")
        Show(controller)._execute()

        _, _, block = controller.calls[0]
        run_respond_block(block).block_for("json")()

        assert controller.count == 2

    def test_wildcard_block(self, controller):
        class Anything(Action):
            @responds_to_any()
            def fallback(self):
                self.fell_back = True

        Anything(controller)._execute()

        _, block = controller.calls[0]
        collector = run_respond_block(block)
        collector.block_for("xml")()

        assert controller.fell_back is True

    def test_override_of_format_block_applies(self, controller):
        class Base(Action):
            @responds_to("html")
            def html(self):
                self.source = "base"

        class Child(Base):
            def html(self):
                self.source = "child"

        Child(controller)._execute()

        _, block = controller.calls[0]
        run_respond_block(block).block_for("html")()

        assert controller.source == "child"

    def test_child_rules_do_not_leak_to_parent(self):
        class Parent(Action):
            pass

        class Child(Parent):
            pass

        Child.add_response("post")
        Child.add_format("json")

        assert len(Parent.responses().responses) == 0
        assert len(Parent.responses().formats) == 0
        assert Child.responses().declared_formats() == ["json"]


# ============================================================================
# Controller proxies
# ============================================================================

class ProxyController(FakeController):

    def increase_var(self):
        self.var += 1

    def fail_after_change(self):
        self.var = 10
        raise RuntimeError("boom")

    def read_var(self):
        return getattr(self, "var", None)


class ProxyAction(Action):

    def execute(self):
        self.var = 2
        self.increase_var()


ProxyAction.controller_method("increase_var", "fail_after_change")
ProxyAction.controller_method("read_var", sync_assigns=False)


class TestControllerProxies:

    def test_sync_around_call(self):
        controller = ProxyController(var=1)
        action = ProxyAction(controller)

        action._execute()

        assert controller.var == 3
        assert action.var == 3

    def test_sync_back_when_call_raises(self):
        controller = ProxyController(var=1)
        action = ProxyAction(controller)

        with pytest.raises(RuntimeError):
            action.fail_after_change()

        assert action.var == 10

    def test_no_sync(self):
        controller = ProxyController(var=1)
        action = ProxyAction(controller)
        action.var = 5

        assert action.read_var() == 1
        assert action.var == 5

    def test_read_only_attributes(self):
        controller = ProxyController()
        controller.params = {"id": "1"}
        action = ProxyAction(controller)

        assert action.params == {"id": "1"}
        assert action.request is controller.request
        assert action.format == "html"

    def test_render_forwards_and_syncs(self):
        controller = ProxyController()
        action = ProxyAction(controller)
        action.post = "post"

        action.render(text="done")

        assert controller.response_body == "done"
        assert controller.post == "post"


# ============================================================================
# Helpers
# ============================================================================

class HelperAction(Action):

    @helper_method
    def shout(self, text):
        return text.upper()

    def greeting(self):
        return "hello"


HelperAction.helper_method("greeting")


class ChildHelperAction(HelperAction):

    @helper_method
    def whisper(self, text):
        return text.lower()


class TestHelpers:

    def test_helper_names(self):
        assert HelperAction.helpers.helper_names == ("shout", "greeting")
        assert ChildHelperAction.helpers.helper_names == ("shout", "greeting", "whisper")

    def test_helpers_inherit(self):
        assert issubclass(ChildHelperAction.helpers, HelperAction.helpers)
        assert not hasattr(HelperAction.helpers, "whisper")

    def test_helper_forwards_to_active_action(self, controller):
        action = HelperAction(controller)
        controller.class_action = action

        context = type("Context", (HelperAction.helpers, ViewContext), {})(controller)

        assert context.shout("hi") == "HI"
        assert context.greeting() == "hello"

    def test_helper_without_active_action(self, controller):
        context = type("Context", (HelperAction.helpers, ViewContext), {})(controller)

        with pytest.raises(NoActiveActionFault):
            context.shout("hi")


# ============================================================================
# Assigns colliding with action properties
# ============================================================================

class TestPropertyAssigns:

    def test_controller_assign_named_like_property_guard(self):
        controller = FakeController(missing="flag")

        class Show(Action):
            def load(self):
                self.post = None

            @property
            def missing(self):
                return self.post is None

            @responds_to("html", on="missing")
            def not_found(self):
                self.render(text="not found")

        action = Show(controller)
        action._execute()

        assert action.missing is True
        assert controller.missing == "flag"
        _, block = controller.calls[0]
        run_respond_block(block).block_for("html")()
        assert controller.response_body == "not found"


# ============================================================================
# Resolution order
# ============================================================================

class TestResolverBeforeFormatGuards:

    def test_format_guard_sees_resolver_state(self, controller):
        class Update(Action):
            @responds_with()
            def result(self):
                self.failed = True
                return "result"

            @responds_to("html", on="_failed")
            def rerender(self):
                self.rerendered = True

            def _failed(self):
                return getattr(self, "failed", False)

        Update(controller)._execute()

        _, resource, block = controller.calls[0]
        assert resource == "result"

        run_respond_block(block).block_for("html")()
        assert controller.rerendered is True
