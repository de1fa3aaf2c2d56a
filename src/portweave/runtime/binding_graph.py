"""
Port-level graph view of a binding list.

Used by the engine to index bindings by source port and to report cycles
at construction. Cycles are legal (two-way bound widgets are common), so
they are reported, not rejected.
"""

from __future__ import annotations

from collections.abc import Iterable

from portweave.specs.binding import ReactiveBinding


class BindingGraph:
    """Directed graph of ports; each enabled binding is one edge."""

    def __init__(self, bindings: Iterable[ReactiveBinding]) -> None:
        self._outgoing: dict[str, list[ReactiveBinding]] = {}
        self._incoming: dict[str, list[ReactiveBinding]] = {}
        self._ports: dict[str, None] = {}

        for binding in bindings:
            if not binding.enabled:
                continue
            self._outgoing.setdefault(binding.source, []).append(binding)
            self._incoming.setdefault(binding.target, []).append(binding)
            self._ports.setdefault(binding.source)
            self._ports.setdefault(binding.target)

    def bindings_from(self, port: str) -> list[ReactiveBinding]:
        """Bindings whose source is ``port``, in declaration order."""
        return list(self._outgoing.get(port, ()))

    def bindings_into(self, port: str) -> list[ReactiveBinding]:
        """Bindings whose target is ``port``, in declaration order."""
        return list(self._incoming.get(port, ()))

    def ports(self) -> list[str]:
        """Every port that appears in an enabled binding, in first-seen order."""
        return list(self._ports)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self._outgoing.values())

    def find_cycles(self) -> list[list[str]]:
        """
        Strongly connected groups of ports that can reach themselves.

        Each group is listed in first-seen port order. A self-binding
        (source == target) is a cycle of one.
        """
        index: dict[str, int] = {}
        lowlink: dict[str, int] = {}
        on_stack: set[str] = set()
        stack: list[str] = []
        groups: list[list[str]] = []
        counter = 0

        # Iterative Tarjan: long binding chains must not hit the recursion limit
        for root in self._ports:
            if root in index:
                continue
            work: list[tuple[str, int]] = [(root, 0)]
            while work:
                port, child_pos = work.pop()
                if child_pos == 0:
                    index[port] = lowlink[port] = counter
                    counter += 1
                    stack.append(port)
                    on_stack.add(port)

                targets = [b.target for b in self._outgoing.get(port, ())]
                descended = False
                for pos in range(child_pos, len(targets)):
                    nxt = targets[pos]
                    if nxt not in index:
                        work.append((port, pos + 1))
                        work.append((nxt, 0))
                        descended = True
                        break
                    if nxt in on_stack:
                        lowlink[port] = min(lowlink[port], index[nxt])
                if descended:
                    continue

                if lowlink[port] == index[port]:
                    group: list[str] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        group.append(member)
                        if member == port:
                            break
                    if len(group) > 1 or port in targets:
                        groups.append(group)

                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[port])

        order = {port: i for i, port in enumerate(self._ports)}
        result = [sorted(group, key=order.__getitem__) for group in groups]
        result.sort(key=lambda group: order[group[0]])
        return result

    def has_cycle(self) -> bool:
        return bool(self.find_cycles())
