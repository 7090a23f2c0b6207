# atlas_guardrails/core/governance/resources.py
"""
Construct Tree Schema – Tagged variants for synthesized Atlas resources.

This module defines the read-only tree that the guard rails walk. Every node
carries a ``kind`` discriminant; Atlas clusters are modelled with their full
property schema while every other construct keeps a free-form property bag.
Nodes are immutable once built, so a traversal can never alter the tree it
validates.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, Field

# -----------------------------------------------------------------------------
# Discriminants
# -----------------------------------------------------------------------------
class ResourceKind(str, Enum):
    """Kinds of construct found in a synthesized stage."""
    STAGE = "stage"
    STACK = "stack"
    CONSTRUCT = "construct"
    PARAMETER = "parameter"
    OUTPUT = "output"
    PROJECT = "atlas_project"
    CLUSTER = "atlas_cluster"
    DATABASE_USER = "atlas_database_user"
    IP_ACCESS_LIST = "atlas_ip_access_list"


class ProviderName(str, Enum):
    """Cloud provider hosting an Atlas region."""
    AWS = "AWS"
    GCP = "GCP"
    AZURE = "AZURE"
    TENANT = "TENANT"


class _FrozenModel(BaseModel):
    class Config:
        frozen = True  # immutable after creation
        extra = "forbid"  # no extra fields

# -----------------------------------------------------------------------------
# Cluster property schema
# -----------------------------------------------------------------------------
class Specs(_FrozenModel):
    """Hardware specification for one node role inside a region."""
    instance_size: Optional[str] = None
    node_count: Optional[int] = Field(None, ge=0)


class AdvancedRegionConfig(_FrozenModel):
    """Placement of a replication spec in one provider region."""
    provider_name: ProviderName = ProviderName.AWS
    region_name: Optional[str] = None
    priority: Optional[int] = None
    electable_specs: Optional[Specs] = None
    read_only_specs: Optional[Specs] = None
    analytics_specs: Optional[Specs] = None


class AdvancedReplicationSpec(_FrozenModel):
    """One shard layout with its region placements."""
    num_shards: int = Field(1, ge=1)
    zone_name: Optional[str] = None
    advanced_region_configs: Optional[List[AdvancedRegionConfig]] = None


class ClusterProperties(_FrozenModel):
    """Properties of an Atlas cluster resource."""
    name: Optional[str] = None
    project_id: Optional[str] = None
    cluster_type: Optional[str] = None
    mongo_db_major_version: Optional[str] = None
    # Any value is accepted; only a literal True enables backups
    backup_enabled: Optional[Any] = None
    replication_specs: Optional[List[AdvancedReplicationSpec]] = None

# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
class _NodeBase(_FrozenModel):
    path: str = Field(..., min_length=1, description="Unique location of the construct in the tree")
    children: List[ResourceNode] = Field(default_factory=list)

    @property
    def node_id(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class ClusterNode(_NodeBase):
    """An Atlas cluster, the only kind the guard rails evaluate."""
    kind: Literal[ResourceKind.CLUSTER] = ResourceKind.CLUSTER
    properties: ClusterProperties = Field(default_factory=ClusterProperties)


class ConstructNode(_NodeBase):
    """Any other construct. Its properties are never inspected by the guard rails."""
    kind: Literal[
        ResourceKind.STAGE,
        ResourceKind.STACK,
        ResourceKind.CONSTRUCT,
        ResourceKind.PARAMETER,
        ResourceKind.OUTPUT,
        ResourceKind.PROJECT,
        ResourceKind.DATABASE_USER,
        ResourceKind.IP_ACCESS_LIST,
    ] = ResourceKind.CONSTRUCT
    properties: Dict[str, Any] = Field(default_factory=dict)


ResourceNode = Annotated[
    Union[ClusterNode, ConstructNode],
    Field(discriminator="kind"),
]

ClusterNode.model_rebuild()
ConstructNode.model_rebuild()

# -----------------------------------------------------------------------------
# Traversal
# -----------------------------------------------------------------------------
def walk(root: ResourceNode) -> Iterator[ResourceNode]:
    """Yield every node of the tree, depth-first, parents before children."""
    pending = [root]
    while pending:
        node = pending.pop()
        yield node
        pending.extend(reversed(node.children))


def find(root: ResourceNode, path: str) -> Optional[ResourceNode]:
    """Return the node at ``path``, or None if the tree has no such node."""
    for node in walk(root):
        if node.path == path:
            return node
    return None


__all__ = [
    "ResourceKind",
    "ProviderName",
    "Specs",
    "AdvancedRegionConfig",
    "AdvancedReplicationSpec",
    "ClusterProperties",
    "ClusterNode",
    "ConstructNode",
    "ResourceNode",
    "walk",
    "find",
]
