"""Dependency graph utilities.

Provides topological sorting for determining the order bulk operations run
in. When package A depends on package B, B is processed first so that A can
link against it, or pick up its freshly bumped version.
"""

from __future__ import annotations

import heapq

from .errors import DependencyCycleError, MissingManifestError
from .models import Package


def internal_dependencies(package: Package, packages: list[Package]) -> list[str]:
    """Return sibling package directories that ``package`` depends on.

    Siblings are referenced by directory name in dependencies or
    devDependencies. External (registry) dependencies are ignored.
    """
    return [
        other.dir
        for other in packages
        if other.dir != package.dir and package.manifest.has_dependency(other.dir)
    ]


def order_by_dependency(packages: list[Package]) -> list[Package]:
    """Topologically sort packages by their internal dependencies.

    Uses Kahn's algorithm to produce an order where dependencies come before
    dependents, including transitive chains. Ties are broken by the input
    (discovery) order, so the result is stable for a given input.

    Args:
        packages: Packages in discovery order.

    Returns:
        The same packages, dependencies first.

    Raises:
        MissingManifestError: If a sibling dependency has no manifest
            carrying its name.
        DependencyCycleError: If a dependency cycle is detected.

    Example:
        [a → b, b, c → b] → [b, a, c]
    """
    by_name = {p.name: i for i, p in enumerate(packages)}

    # Count incoming edges (dependencies) for each package
    in_degree = [0] * len(packages)
    # Track reverse dependencies (who depends on each package)
    dependents: list[list[int]] = [[] for _ in packages]

    for i, package in enumerate(packages):
        for dep in internal_dependencies(package, packages):
            if dep not in by_name:
                raise MissingManifestError(
                    f"Missing manifest for declared dependency '{dep}' of {package.dir}"
                )
            in_degree[i] += 1
            dependents[by_name[dep]].append(i)

    # Always take the earliest discovered package whose deps are satisfied
    ready = [i for i, d in enumerate(in_degree) if d == 0]
    heapq.heapify(ready)
    order: list[Package] = []

    while ready:
        node = heapq.heappop(ready)
        order.append(packages[node])
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, dependent)

    # If we didn't process all packages, there must be a cycle
    if len(order) != len(packages):
        remaining = [p.dir for i, p in enumerate(packages) if in_degree[i] > 0]
        raise DependencyCycleError(remaining)

    return order
