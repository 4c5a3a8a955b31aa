"""Clustering stage contract.

Enforces the guarantee that one clustering pass partitions the source
features: every feature lands in exactly one cluster and no cluster is
empty.
"""

from maplat.contracts.base import require


def assert_partitioned(features, clusters) -> None:
    """Enforce clustering contract.

    Parameters
    ----------
    features : sequence of Feature
        Source features handed to the clusterer (point geometries only).

    clusters : sequence of Cluster
        Output of one clustering pass.

    Raises
    ------
    ContractViolation
        If a cluster is empty, a feature appears twice, or a feature is lost.
    """
    seen = set()
    for cluster in clusters:
        require(
            len(cluster.members) > 0,
            "Cluster contract violated: empty cluster produced"
        )
        for member in cluster.members:
            require(
                id(member) not in seen,
                "Cluster contract violated: feature assigned to more than one cluster"
            )
            seen.add(id(member))

    require(
        len(seen) == len(features),
        f"Cluster contract violated: {len(features)} features in, {len(seen)} clustered"
    )
