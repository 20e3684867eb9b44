# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Textual front-end that paints navigator screens and feeds input back to it"""

import logging
from typing import Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Input, Label, ListItem, ListView, Static, Tree

from .navigator import Navigator
from .render import DialogSpec, ListEntry, Screen, TreeNode

log = logging.getLogger(__name__)

LIST_ALL = "List all groups"
SEARCH = "Search group by name"


def styled(label: str, color: Optional[str]) -> Text:
    return Text(label, style=color or "")


class EntryItem(ListItem):
    """List item that carries the navigation reference of its entry."""

    def __init__(self, entry: ListEntry) -> None:
        super().__init__(Label(styled(entry.label, entry.color)))
        self.ref = entry.ref


class LaunchScreen(ModalScreen[Optional[str]]):
    """Choose between listing every group and searching by name."""

    def compose(self) -> ComposeResult:
        yield Static("Choose an Option", classes="title")
        yield Button(LIST_ALL, id="list_all", variant="primary")
        yield Button(SEARCH, id="search")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(str(event.button.label))


class SearchScreen(ModalScreen[Optional[str]]):
    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, value: str = "") -> None:
        super().__init__()
        self.value = value

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Enter Group Name", value=self.value, id="search_input")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ChoiceScreen(ModalScreen[Optional[object]]):
    """Modal list for the branch picker and the job actions."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, spec: DialogSpec) -> None:
        super().__init__()
        self.spec = spec

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Static(self.spec.title, classes="title")
            yield ListView(*[EntryItem(option) for option in self.spec.options])

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        self.dismiss(event.item.ref)

    def action_cancel(self) -> None:
        self.dismiss(None)


class BrowserApp(App):
    """GitLab group, pipeline and job browser"""

    TITLE = "GitLab Pipelines"
    CSS = """
    .title { text-style: bold; padding: 0 1; }
    .dialog { width: 80%; height: auto; max-height: 80%; border: round $accent; }
    #error { color: $error; padding: 0 1; }
    #hints { color: $text-muted; padding: 0 1; }
    ListItem { padding: 0 1; border-bottom: solid $panel; }
    """

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("slash", "search", "Search"),
        Binding("g", "groups", "Groups"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, navigator: Navigator, initial_filter: Optional[str] = None) -> None:
        super().__init__()
        self.navigator = navigator
        self.initial_filter = initial_filter

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="heading", classes="title")
        yield Vertical(id="body")
        yield Static("", id="error")
        yield Static("", id="hints")
        yield Footer()

    def on_mount(self) -> None:
        if self.initial_filter is not None:
            self.call_later(self.launch, self.initial_filter)
        else:
            self.push_screen(LaunchScreen(), self.on_launch_choice)

    async def on_launch_choice(self, choice: Optional[str]) -> None:
        if choice == SEARCH:
            self.push_screen(SearchScreen(), self.launch)
        else:
            await self.launch("")

    async def launch(self, filter_text: Optional[str]) -> None:
        self.navigator.launch(filter_text or "")
        await self.paint()

    # Painting

    async def paint(self) -> None:
        if not self.navigator.stack:
            self.query_one("#error", Static).update(self.navigator.error or "")
            return
        screen = self.navigator.render()
        log.debug("Painting %s (dialog: %s)", screen.kind.value, screen.dialog is not None)
        self.query_one("#heading", Static).update(screen.title)
        self.query_one("#error", Static).update(screen.error or "")
        self.query_one("#hints", Static).update(screen.hints)

        body = self.query_one("#body", Vertical)
        await body.remove_children()
        widget = self.build_widget(screen)
        await body.mount(widget)
        widget.focus()

        if screen.dialog is not None and not isinstance(self.screen, ChoiceScreen):
            self.push_screen(ChoiceScreen(screen.dialog), self.on_dialog_choice)

    def build_widget(self, screen: Screen):
        if screen.tree is not None:
            tree: Tree = Tree(styled(screen.tree.label, screen.tree.color))
            tree.show_root = False
            self.add_tree_nodes(tree.root, screen.tree)
            tree.root.expand_all()
            return tree
        if screen.text is not None:
            return VerticalScroll(Static(Text.from_ansi(screen.text)))
        return ListView(*[EntryItem(entry) for entry in screen.entries])

    def add_tree_nodes(self, parent, node: TreeNode) -> None:
        for child in node.children:
            label = styled(child.label, child.color)
            if child.children:
                self.add_tree_nodes(parent.add(label, data=child.ref), child)
            elif child.ref is not None:
                parent.add_leaf(label, data=child.ref)
            else:
                parent.add_leaf(label)

    # Input events

    async def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if event.node.data is None:
            # Group and instance nodes only expand or collapse
            return
        self.navigator.enter(event.node.data)
        await self.paint()

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        self.navigator.enter(event.item.ref)
        await self.paint()

    async def on_dialog_choice(self, choice) -> None:
        if choice is None:
            self.navigator.cancel_dialog()
        else:
            self.navigator.enter(choice)
        await self.paint()

    async def action_back(self) -> None:
        if self.navigator.back():
            await self.paint()

    def action_search(self) -> None:
        self.push_screen(SearchScreen(self.navigator.last_filter), self.on_search)

    async def on_search(self, filter_text: Optional[str]) -> None:
        if filter_text is None:
            return
        if not self.navigator.stack:
            self.navigator.launch(filter_text)
        elif len(self.navigator.stack) == 1:
            self.navigator.submit_filter(filter_text)
        else:
            self.navigator.replace_root(filter_text)
        await self.paint()

    async def action_groups(self) -> None:
        self.navigator.replace_root()
        await self.paint()

    async def action_refresh(self) -> None:
        if self.navigator.stack:
            self.navigator.refresh()
        else:
            self.navigator.launch(self.initial_filter or "")
        await self.paint()
