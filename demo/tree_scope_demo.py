"""
Tree scope demo: per-page models found by ancestor walk, one of them promoted.
"""

from bilocator import (
    BindingSpec,
    Bilocator,
    Location,
    Node,
    NotFoundError,
    NotRegisteredError,
    Registry,
    TreeScope,
    ValueNotifier,
)


class PageModel(ValueNotifier[str]):
    pass


def main() -> None:
    registry = Registry()
    scope = TreeScope(registry)
    bilocator = Bilocator(scope)

    app = Node("app")
    inbox = app.child("inbox")
    inbox_list = inbox.child("list")
    settings = app.child("settings")
    settings_form = settings.child("form")

    bilocator.on_mount(inbox, BindingSpec.of(PageModel, factory=lambda: PageModel("inbox"), location=Location.TREE))
    bilocator.on_mount(
        settings, BindingSpec.of(PageModel, factory=lambda: PageModel("settings"), location=Location.TREE)
    )

    print("list sees:", scope.resolve_non_reactive(inbox_list, PageModel).value)
    print("form sees:", scope.resolve_non_reactive(settings_form, PageModel).value)

    try:
        scope.resolve_non_reactive(app, PageModel)
    except NotFoundError as e:
        print("app sees nothing:", type(e).__name__)

    model = scope.resolve_reactive(inbox_list, PageModel)
    model.value = "inbox (3 unread)"
    print("list needs update:", inbox_list.needs_update)

    scope.promote(inbox_list, PageModel, name="inbox")
    print("registry sees:", registry.get(PageModel, "inbox").value)

    bilocator.unmount_subtree(inbox)
    try:
        registry.get(PageModel, "inbox")
    except NotRegisteredError as e:
        print("after unmount:", type(e).__name__)

    bilocator.unmount_subtree(settings)


if __name__ == "__main__":
    main()
