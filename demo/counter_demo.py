"""
Counter demo: a registry-held service observed by two views.
"""

import logging

from bilocator import BindingSpec, Bilocator, ChangeNotifier, Node, Observer, Registry, TreeScope


class Counter(ChangeNotifier):
    def __init__(self) -> None:
        super().__init__()
        self.count = 0

    def increment(self) -> None:
        self.count += 1
        self.notify_listeners()


class CounterLabel:
    def __init__(self, scope: TreeScope, label: str) -> None:
        self.label = label
        self.observer = Observer(scope)
        self.counter = self.observer.listen_to(Counter, self.render)

    def render(self) -> None:
        print(f"[{self.label}] count = {self.counter.count}")

    def dispose(self) -> None:
        self.observer.cancel_subscriptions()


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    registry = Registry()
    scope = TreeScope(registry)
    bilocator = Bilocator(scope)

    app = Node("app")
    bilocator.on_mount(app, BindingSpec.of(Counter, factory=Counter))

    left = CounterLabel(scope, "left")
    right = CounterLabel(scope, "right")

    counter = registry.get(Counter)
    counter.increment()
    counter.increment()

    right.dispose()
    counter.increment()

    left.dispose()
    bilocator.on_unmount(app)
    assert not registry.is_registered(Counter)
    assert counter.is_disposed
    print("Counter unregistered and disposed")


if __name__ == "__main__":
    main()
