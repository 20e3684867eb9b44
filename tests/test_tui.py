import asyncio

from textual.widgets import Static, Tree

from gitlab_browser.navigator import Navigator
from gitlab_browser.tui import BrowserApp, ChoiceScreen, SearchScreen
from gitlab_browser.views import GroupListParams, PipelineListParams, ViewKind


def make_app(fake_client, config, initial_filter=""):
    return BrowserApp(Navigator(fake_client, config), initial_filter=initial_filter)


def shown_text(widget: Static) -> str:
    content = getattr(widget, "content", None)
    if content is None:
        content = widget.renderable
    return str(content)


def find_node(node, data):
    if node.data == data:
        return node
    for child in node.children:
        found = find_node(child, data)
        if found is not None:
            return found
    return None


async def activate_project(app, pilot, project_id):
    tree = app.query_one(Tree)
    tree.focus()
    await pilot.pause()
    tree.cursor_line = find_node(tree.root, project_id).line
    await pilot.press("enter")
    await pilot.pause()


def test_app_instantiates(fake_client, config):
    navigator = Navigator(fake_client, config)
    app = BrowserApp(navigator, initial_filter="al")

    assert app.navigator is navigator
    assert app.initial_filter == "al"
    assert {binding.key for binding in app.BINDINGS} >= {"escape", "g", "r", "q"}


def test_drill_down_to_logs_and_back(fake_client, config):
    async def scenario():
        app = make_app(fake_client, config)
        async with app.run_test() as pilot:
            await pilot.pause()
            nav = app.navigator
            assert nav.current.kind is ViewKind.GROUP_LIST

            await activate_project(app, pilot, 42)
            assert isinstance(app.screen, ChoiceScreen)

            # First option of each list: branch "main", pipeline 7, job 99, "Logs"
            await pilot.press("enter")
            await pilot.pause()
            assert nav.current.params == PipelineListParams(42, "main")

            await pilot.press("enter")
            await pilot.pause()
            assert nav.current.kind is ViewKind.JOB_LIST

            await pilot.press("enter")
            await pilot.pause()
            assert isinstance(app.screen, ChoiceScreen)
            await pilot.press("enter")
            await pilot.pause()
            assert nav.current.kind is ViewKind.JOB_LOGS

            kinds = []
            for _ in range(3):
                await pilot.press("escape")
                await pilot.pause()
                kinds.append(nav.current.kind)
            assert kinds == [ViewKind.JOB_LIST, ViewKind.PIPELINE_LIST, ViewKind.GROUP_LIST]
            assert len(nav.stack) == 1

    asyncio.run(scenario())


def test_search_at_root_filters_groups(fake_client, config):
    async def scenario():
        app = make_app(fake_client, config)
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("slash")
            await pilot.pause()
            assert isinstance(app.screen, SearchScreen)

            await pilot.press("a", "l", "enter")
            await pilot.pause()

            nav = app.navigator
            assert nav.stack[0].params == GroupListParams("al")
            assert len(nav.stack) == 1
            assert [node.group.name for node in nav.current.cached_items] == ["Alpha"]

    asyncio.run(scenario())


def test_search_from_pipelines_returns_to_filtered_groups(fake_client, config):
    async def scenario():
        app = make_app(fake_client, config)
        async with app.run_test() as pilot:
            await pilot.pause()
            await activate_project(app, pilot, 42)
            await pilot.press("enter")
            await pilot.pause()
            nav = app.navigator
            assert nav.current.kind is ViewKind.PIPELINE_LIST

            await pilot.press("slash")
            await pilot.pause()
            await pilot.press("b", "e", "enter")
            await pilot.pause()

            assert len(nav.stack) == 1
            assert nav.current.params == GroupListParams("be")

    asyncio.run(scenario())


def test_groups_key_returns_to_root(fake_client, config):
    async def scenario():
        app = make_app(fake_client, config, initial_filter="al")
        async with app.run_test() as pilot:
            await pilot.pause()
            await activate_project(app, pilot, 42)
            await pilot.press("enter")
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            nav = app.navigator
            assert nav.current.kind is ViewKind.JOB_LIST

            await pilot.press("g")
            await pilot.pause()

            assert len(nav.stack) == 1
            assert nav.current.params == GroupListParams("al")

    asyncio.run(scenario())


def test_failed_fetch_shows_error_line(fake_client, config):
    async def scenario():
        app = make_app(fake_client, config)
        async with app.run_test() as pilot:
            await pilot.pause()
            fake_client.fail("list_branches")

            await activate_project(app, pilot, 42)

            nav = app.navigator
            assert nav.dialog is None
            assert nav.current.kind is ViewKind.GROUP_LIST
            error = shown_text(app.query_one("#error", Static))
            assert "Error in list_branches: connection refused" in error

    asyncio.run(scenario())
