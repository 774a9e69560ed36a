from typing import Dict, Hashable, List


class UnionFind:
    """Disjoint-set forest with path compression. Elements are added on first touch."""

    def __init__(self):
        self._parent: Dict[Hashable, Hashable] = {}

    def find(self, x: Hashable) -> Hashable:
        parent = self._parent
        if x not in parent:
            parent[x] = x
            return x

        root = x
        while parent[root] != root:
            root = parent[root]

        # Compress
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union(self, a: Hashable, b: Hashable) -> bool:
        """Merge the sets of ``a`` and ``b``. Returns False if they were already joined."""
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False
        self._parent[root_a] = root_b
        return True

    def groups(self) -> List[List[Hashable]]:
        """Members grouped by root, groups and members in first-touch order."""
        by_root: Dict[Hashable, List[Hashable]] = {}
        for x in list(self._parent):
            by_root.setdefault(self.find(x), []).append(x)
        return list(by_root.values())
