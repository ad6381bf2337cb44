"""Tests for example groups and examples."""

import io

import pytest
from rich.console import Console

from skilltester.spec.group import (
    Example,
    ExampleGroup,
    SpecDefinitionError,
    collect_groups,
    describe,
    describe_error,
)
from skilltester.spec.matchers import eq
from skilltester.spec.reporter import ConsoleReporter
from skilltester.spec.results import ExampleStatus


@pytest.fixture
def reporter():
    """Create a reporter writing to a buffer."""
    return ConsoleReporter(Console(file=io.StringIO(), width=200))


class TestDeclaration:
    """Tests for building the group tree."""

    def test_describe_returns_group(self):
        """Test that the decorated name is bound to the group."""

        @describe("A")
        def group(g):
            pass

        assert isinstance(group, ExampleGroup)
        assert group.description == "A"
        assert group.parent is None

    def test_context_is_only_a_nested_synonym(self):
        """Test that ``context`` is a group method, not a root declaration."""
        from skilltester import spec
        from skilltester.spec import group as group_module

        assert not hasattr(group_module, "context")
        assert ExampleGroup.context is ExampleGroup.describe
        assert spec.context.ExecutionContext is not None

    def test_collect_groups(self):
        """Test that root groups declared inside the block are collected in order."""
        with collect_groups() as collected:
            describe("A")(lambda g: None)

            @describe("B")
            def b(g):
                @g.describe("nested")
                def nested(inner):
                    pass

        assert [g.description for g in collected] == ["A", "B"]
        assert describe("C")(lambda g: None) not in collected

    def test_body_runs_immediately(self):
        """Test that the declaration body is evaluated at declaration time."""
        calls = []

        @describe("A")
        def group(g):
            calls.append(g)

        assert calls == [group]

    def test_nested_groups_and_examples(self):
        """Test children and examples are registered in order."""

        @describe("A")
        def group(g):
            @g.it("first")
            def first(ctx):
                pass

            @g.describe("B")
            def b(inner):
                @inner.it("c")
                def c(ctx):
                    pass

            @g.context("D")
            def d(inner):
                pass

            @g.it("second")
            def second(ctx):
                pass

        assert [e.description for e in group.examples] == ["first", "second"]
        assert [c.description for c in group.children] == ["B", "D"]
        assert group.children[0].parent is group
        assert isinstance(group.children[0].examples[0], Example)
        assert group.example_count == 3

    def test_full_description(self):
        """Test root-to-leaf space-joined descriptions."""

        @describe("A")
        def group(g):
            @g.describe("B")
            def b(inner):
                @inner.it("c")
                def c(ctx):
                    pass

        child = group.children[0]
        assert group.full_description == "A"
        assert child.full_description == "A B"
        assert child.examples[0].full_description == "A B c"

    def test_hooks_registered_in_order(self):
        """Test before/after hooks keep declaration order."""

        @describe("A")
        def group(g):
            @g.before
            def one(ctx):
                pass

            @g.before
            def two(ctx):
                pass

            @g.after
            def three(ctx):
                pass

        assert [h.__name__ for h in group.hooks["before"]] == ["one", "two"]
        assert [h.__name__ for h in group.hooks["after"]] == ["three"]

    def test_second_skip_condition_rejected(self):
        """Test that a group accepts at most one skip condition."""
        with pytest.raises(SpecDefinitionError):

            @describe("A")
            def group(g):
                @g.skip_all_if("first")
                def first(ctx):
                    return False

                @g.skip_all_if("second")
                def second(ctx):
                    return False


class TestShouldSkip:
    """Tests for skip evaluation."""

    def test_no_condition_never_skips(self):
        """Test a group without a condition."""
        group = ExampleGroup("A")
        assert group.should_skip({}) == (False, None)

    def test_condition_uses_context_data(self):
        """Test the condition sees the context mapping."""

        @describe("A")
        def group(g):
            @g.skip_all_if("not gated")
            def not_gated(ctx):
                return ctx["kind"] != "gated"

        assert group.should_skip({"kind": "plain"}) == (True, "not gated")
        assert group.should_skip({"kind": "gated"}) == (False, "not gated")

    def test_condition_result_is_coerced_to_bool(self):
        """Test truthy condition values."""

        @describe("A")
        def group(g):
            @g.skip_all_if()
            def condition(ctx):
                return "non-empty"

        assert group.should_skip({}) == (True, "Skipped")

    def test_reevaluated_each_run(self):
        """Test that the skip decision is not cached."""

        @describe("A")
        def group(g):
            @g.skip_all_if("flag set")
            def flag(ctx):
                return ctx.get("flag", False)

        assert group.should_skip({"flag": True})[0] is True
        assert group.should_skip({"flag": False})[0] is False


class TestExampleRun:
    """Tests for Example.run outcomes."""

    def _example(self, body, before=None, after=None):
        group = ExampleGroup("Group")
        for hook in before or []:
            group.before(hook)
        for hook in after or []:
            group.after(hook)
        return group.it("example")(body)

    def test_passing_example(self):
        """Test a body that raises nothing."""
        result = self._example(lambda ctx: None).run({})

        assert result.status == ExampleStatus.PASSED
        assert result.message == ""
        assert result.full_description == "Group example"

    def test_assertion_failure(self):
        """Test a failed expectation is FAILED with the matcher message."""
        result = self._example(lambda ctx: ctx.expect(1).to(eq(2))).run({})

        assert result.status == ExampleStatus.FAILED
        assert "expected: 2" in result.message

    def test_skip_signal(self):
        """Test ctx.skip is SKIPPED with the reason."""
        result = self._example(lambda ctx: ctx.skip("not applicable")).run({})

        assert result.status == ExampleStatus.SKIPPED
        assert result.message == "not applicable"

    def test_unexpected_error(self):
        """Test any other exception is ERROR with the original message."""

        def body(ctx):
            raise RuntimeError("boom")

        result = self._example(body).run({})

        assert result.status == ExampleStatus.ERROR
        assert result.failed
        assert result.message == "RuntimeError: boom"

    def test_unknown_context_value_is_error(self):
        """Test unresolved names surface as unexpected errors."""
        result = self._example(lambda ctx: ctx["missing"]).run({})

        assert result.status == ExampleStatus.ERROR
        assert "missing" in result.message

    def test_before_hooks_share_context_with_body(self):
        """Test before hooks run in order against the same context."""

        def first(ctx):
            ctx.items = ["first"]

        def second(ctx):
            ctx.items.append("second")

        def body(ctx):
            ctx.expect(ctx.items).to(eq(["first", "second"]))

        result = self._example(body, before=[first, second]).run({})
        assert result.status == ExampleStatus.PASSED

    def test_before_hook_failure_classified(self):
        """Test that a failing before hook becomes the example outcome."""
        body_calls = []

        def hook(ctx):
            raise ValueError("bad fixture")

        result = self._example(lambda ctx: body_calls.append(1), before=[hook]).run({})

        assert result.status == ExampleStatus.ERROR
        assert body_calls == []

    def test_after_hooks_run_after_failure(self):
        """Test after hooks run even when the body fails."""
        calls = []

        def body(ctx):
            calls.append("body")
            ctx.fail("nope")

        result = self._example(body, after=[lambda ctx: calls.append("after")]).run({})

        assert calls == ["body", "after"]
        assert result.status == ExampleStatus.FAILED

    def test_after_hooks_run_after_skip(self):
        """Test after hooks run when the body skips."""
        calls = []
        result = self._example(
            lambda ctx: ctx.skip("later"), after=[lambda ctx: calls.append("after")]
        ).run({})

        assert calls == ["after"]
        assert result.status == ExampleStatus.SKIPPED

    def test_after_hook_error_fails_passing_example(self):
        """Test an after hook error changes a passing outcome."""

        def cleanup(ctx):
            raise OSError("cannot clean")

        result = self._example(lambda ctx: None, after=[cleanup]).run({})

        assert result.status == ExampleStatus.ERROR
        assert "cannot clean" in result.message

    def test_after_hook_error_keeps_earlier_failure(self):
        """Test an after hook error does not replace the first outcome."""

        def cleanup(ctx):
            raise OSError("cannot clean")

        result = self._example(lambda ctx: ctx.fail("first"), after=[cleanup]).run({})

        assert result.status == ExampleStatus.FAILED
        assert result.message == "first"

    def test_keyboard_interrupt_propagates(self):
        """Test that non-Exception errors are not swallowed."""

        def body(ctx):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            self._example(body).run({})


class TestGroupRun:
    """Tests for ExampleGroup.run."""

    def test_isolation_between_examples(self, reporter):
        """Test that error, skip and pass outcomes do not affect each other."""

        @describe("Isolation")
        def group(g):
            @g.it("raises")
            def raises(ctx):
                raise RuntimeError("boom")

            @g.it("skips")
            def skips(ctx):
                ctx.skip("not now")

            @g.it("passes")
            def passes(ctx):
                ctx.expect(1).to(eq(1))

        group.run(reporter, {})

        assert reporter.stats == {"total": 3, "passed": 1, "failed": 1, "skipped": 1}
        assert [r.status for r in reporter.results] == [
            ExampleStatus.ERROR,
            ExampleStatus.SKIPPED,
            ExampleStatus.PASSED,
        ]

    def test_failure_record_description(self, reporter):
        """Test the failure record carries the hierarchical description."""

        @describe("A")
        def group(g):
            @g.describe("B")
            def b(inner):
                @inner.it("c")
                def c(ctx):
                    ctx.fail("broken")

        group.run(reporter, {})

        assert len(reporter.failures) == 1
        assert reporter.failures[0].full_description == "A B c"
        assert reporter.failures[0].index == 1

    def test_skipped_group_does_not_visit_subtree(self, reporter):
        """Test whole-subtree skip semantics."""
        visited = []

        @describe("Skipped")
        def group(g):
            @g.skip_all_if("not applicable")
            def always(ctx):
                return True

            @g.before
            def hook(ctx):
                visited.append("hook")

            @g.it("example")
            def example(ctx):
                visited.append("example")

            @g.describe("child")
            def child(inner):
                @inner.it("nested")
                def nested(ctx):
                    visited.append("nested")

        group.run(reporter, {})

        assert visited == []
        assert reporter.stats == {"total": 0, "passed": 0, "failed": 0, "skipped": 0}
        assert reporter.skipped_groups == [("Skipped", "not applicable")]

    def test_skipped_child_group_only(self, reporter):
        """Test that siblings of a skipped group still run."""

        @describe("Root")
        def group(g):
            @g.it("runs")
            def runs(ctx):
                pass

            @g.describe("skipped child")
            def skipped(inner):
                @inner.skip_all_if("off")
                def off(ctx):
                    return True

                @inner.it("never")
                def never(ctx):
                    pass

            @g.describe("running child")
            def running(inner):
                @inner.it("also runs")
                def also_runs(ctx):
                    pass

        group.run(reporter, {})

        assert reporter.stats["passed"] == 2
        assert reporter.stats["total"] == 2

    def test_hooks_not_inherited_by_child_groups(self, reporter):
        """Test only the immediate group's hooks run."""

        @describe("Parent")
        def group(g):
            @g.before
            def set_flag(ctx):
                ctx.flag = True

            @g.describe("Child")
            def child(inner):
                @inner.it("has no flag")
                def no_flag(ctx):
                    ctx.expect(hasattr(ctx, "flag")).to(eq(False))

        group.run(reporter, {})

        assert reporter.stats["passed"] == 1

    def test_examples_run_before_child_groups(self, reporter):
        """Test traversal order."""
        order = []

        @describe("Root")
        def group(g):
            @g.describe("child")
            def child(inner):
                @inner.it("nested")
                def nested(ctx):
                    order.append("nested")

            @g.it("own")
            def own(ctx):
                order.append("own")

        group.run(reporter, {})

        assert order == ["own", "nested"]

    def test_fresh_context_per_example(self, reporter):
        """Test attribute state does not leak between examples."""

        @describe("Root")
        def group(g):
            @g.it("sets state")
            def sets(ctx):
                ctx.value = 1

            @g.it("does not see state")
            def reads(ctx):
                ctx.expect(hasattr(ctx, "value")).to(eq(False))

        group.run(reporter, {})

        assert reporter.stats["passed"] == 2

    def test_skip_condition_error_reported_once(self, reporter):
        """Test a raising skip condition counts one failure and skips the subtree."""

        @describe("Broken")
        def group(g):
            @g.skip_all_if("never")
            def condition(ctx):
                return ctx["missing"]

            @g.it("never runs")
            def never(ctx):
                pass

        group.run(reporter, {})

        assert reporter.stats == {"total": 1, "passed": 0, "failed": 1, "skipped": 0}
        assert reporter.failures[0].full_description == "Broken (skip condition)"
        assert reporter.failures[0].status == ExampleStatus.ERROR


class TestDescribeError:
    """Tests for describe_error."""

    def test_with_message(self):
        """Test type and message are combined."""
        assert describe_error(ValueError("bad")) == "ValueError: bad"

    def test_without_message(self):
        """Test type name alone when the message is empty."""
        assert describe_error(RuntimeError()) == "RuntimeError"
