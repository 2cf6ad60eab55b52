"""
Full request flow: controller dispatch into class actions with templates,
guards, format blocks and MIME injection.
"""

import json
from dataclasses import dataclass

import pytest

from classaction import (
    Action,
    ClassActionSupport,
    Controller,
    TemplateEngine,
    UnknownFormatFault,
    helper_method,
    responds_to,
)


@dataclass
class Post:
    id: int
    title: str


POSTS = {1: Post(1, "Hello")}


ENGINE = TemplateEngine(templates={
    "posts/show.html": "<h1>{{ post.title }}</h1>{{ shout(post.title) }}",
    "posts/edit.html": "editing {{ post.title }}: {{ errors|join(', ') }}",
})


class PostsController(ClassActionSupport, Controller):
    mimes_for_respond_to = {"html": {}, "json": {}}
    template_engine = ENGINE
    class_actions = ["show", "update"]
    action_delegates = ["shout"]

    class ShowAction(Action):

        def load_post(self):
            self.post = POSTS.get(int(self.params["id"]))

        @property
        def missing(self):
            return self.post is None

        @helper_method
        def shout(self, text):
            return text.upper()

        @responds_to("html", on="missing")
        def not_found(self):
            self.render(text="not found", status=404)

    ShowAction.add_response("post")

    class UpdateAction(Action):

        def load_post(self):
            self.post = Post(**vars(POSTS[int(self.params["id"])]))
            self.errors = []

        def validate(self):
            if not self.params.get("title"):
                self.errors.append("title is required")

        def save(self):
            if not self.errors:
                self.post.title = self.params["title"]
                self.redirect_to(f"/posts/{self.post.id}")

        def after_save(self):
            self.after_save_ran = True

        @property
        def invalid(self):
            return bool(self.errors)

        @responds_to("html", on="invalid")
        def rerender(self):
            self.render("posts/edit.html", status=422)

    UpdateAction.add_response("post")


class StatsController(ClassActionSupport, Controller):
    class_actions = ["summary"]

    class SummaryAction(Action):

        def prepare(self):
            self.count = 1

        @responds_to("json")
        def as_json(self):
            self.count += 1
            self.render(json={"count": self.count})


# ============================================================================
# Show
# ============================================================================

class TestShow:

    def test_html(self, make_controller):
        controller = make_controller(PostsController, params={"id": "1"})
        controller.process("show")

        assert controller.status == 200
        assert controller.response_body == "<h1>Hello</h1>HELLO"
        assert controller.post is POSTS[1]

    def test_guarded_format_block(self, make_controller):
        controller = make_controller(PostsController, params={"id": "99"})
        controller.show()

        assert controller.status == 404
        assert controller.response_body == "not found"

    def test_declared_formats_restrict_response(self, make_controller):
        controller = make_controller(PostsController, params={"id": "1"}, accept="application/json")

        with pytest.raises(UnknownFormatFault):
            controller.show()

    def test_mimes_injected(self):
        assert PostsController.mimes_for_respond_to == {
            "html": {"only": ["show", "update"]},
            "json": {"except": ["show", "update"]},
        }

    def test_delegated_helper(self, make_controller):
        controller = make_controller(PostsController, params={"id": "1"})
        controller.show()

        assert controller.shout("quiet") == "QUIET"


# ============================================================================
# Update
# ============================================================================

class TestUpdate:

    def test_redirect_stops_steps(self, make_controller):
        controller = make_controller(PostsController, params={"id": "1", "title": "New"}, method="POST")
        controller.update()

        assert controller.status == 302
        assert controller.location == "/posts/1"
        assert controller.post.title == "New"
        assert not hasattr(controller, "after_save_ran")
        assert POSTS[1].title == "Hello"

    def test_invalid_rerenders(self, make_controller):
        controller = make_controller(PostsController, params={"id": "1"}, method="POST")
        controller.update()

        assert controller.status == 422
        assert controller.response_body == "editing Hello: title is required"
        assert controller.after_save_ran is True


# ============================================================================
# Format block assigns
# ============================================================================

class TestFormatBlocks:

    def test_block_assigns_reach_controller(self, make_controller):
        controller = make_controller(StatsController, accept="application/json")
        controller.summary()

        assert json.loads(controller.response_body) == {"count": 2}
        assert controller.count == 2

    def test_only_declared_format_allowed(self):
        assert StatsController.mimes_for_action("summary") == ["json"]
