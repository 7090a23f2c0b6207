# atlas_guardrails/core/stacks/atlas_cluster_stack.py
"""
Atlas Cluster Stack – Declarative construct tree for one Atlas deployment.

The builder turns stack parameters into the construct tree the guard rails
validate: the stack parameters, an AtlasDeployment construct holding the
project, a replica set cluster, a database user and an IP access list entry,
and the stack outputs. Nothing is provisioned and no credentials are read.
"""

import ipaddress
import logging
import re
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from atlas_guardrails.constants import (
    ACCESS_LIST_COMMENT,
    ALLOWED_INSTANCE_SIZES,
    CLUSTER_TYPE_REPLICASET,
    DEFAULT_STACK_ID,
    DEFAULT_STAGE_ID,
    ELECTABLE_NODE_COUNT,
)
from atlas_guardrails.core.governance.resources import (
    AdvancedRegionConfig,
    AdvancedReplicationSpec,
    ClusterNode,
    ClusterProperties,
    ConstructNode,
    ProviderName,
    ResourceKind,
    Specs,
)

logger = logging.getLogger(__name__)

_ORG_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

PARAMETER_DESCRIPTIONS: Dict[str, str] = {
    "AtlasProfileName": "Name of the Secrets Manager profile (cfn/atlas/profile/{name}) that stores Atlas API keys.",
    "AtlasOrgId": "MongoDB Atlas organization identifier (24 character hex string).",
    "AtlasProjectName": "Name to assign to the MongoDB Atlas project.",
    "AtlasClusterName": "Name to assign to the Atlas cluster.",
    "AtlasClusterRegion": "Primary region for the Atlas cluster (Atlas region name such as AWS_US_EAST_1).",
    "AtlasClusterInstanceSize": "Cluster instance size (M10, M20, etc.).",
    "MongoDbMajorVersion": "MongoDB major version to deploy.",
    "AtlasDbUsername": "Database user name created in the Atlas project.",
    "AtlasTrustedCidrs": "CIDR block that should be allowed to connect to the cluster.",
}


class ClusterStackParameters(BaseModel):
    """Parameters of the Atlas cluster stack, keyed by their parameter file names."""
    profile_name: str = Field("default", alias="AtlasProfileName")
    org_id: str = Field(..., alias="AtlasOrgId")
    project_name: str = Field("aws-cdk-atlas-project", alias="AtlasProjectName")
    cluster_name: str = Field("aws-cdk-atlas-cluster", alias="AtlasClusterName")
    cluster_region: str = Field("US_EAST_1", alias="AtlasClusterRegion")
    instance_size: str = Field("M10", alias="AtlasClusterInstanceSize")
    mongo_db_major_version: str = Field("7.0", alias="MongoDbMajorVersion")
    db_username: str = Field("atlas-user", alias="AtlasDbUsername")
    trusted_cidr: str = Field("0.0.0.0/0", alias="AtlasTrustedCidrs")

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"  # secrets such as AtlasDbUserPassword are never read

    @field_validator("org_id")
    def validate_org_id(cls, v: str) -> str:
        if not _ORG_ID_PATTERN.match(v):
            raise ValueError(f"Invalid Atlas organization id '{v}': expected 24 hex characters")
        return v

    @field_validator("instance_size")
    def validate_instance_size(cls, v: str) -> str:
        if v not in ALLOWED_INSTANCE_SIZES:
            raise ValueError(f"Instance size '{v}' not in allowed values {list(ALLOWED_INSTANCE_SIZES)}")
        return v

    @field_validator("trusted_cidr")
    def validate_trusted_cidr(cls, v: str) -> str:
        try:
            ipaddress.ip_network(v, strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid CIDR block '{v}'") from e
        return v


def _parameter_nodes(stack_path: str, parameters: ClusterStackParameters) -> List[ConstructNode]:
    nodes = []
    for name, value in parameters.model_dump(by_alias=True).items():
        properties = {
            "type": "String",
            "description": PARAMETER_DESCRIPTIONS[name],
            "value": value,
        }
        if name == "AtlasClusterInstanceSize":
            properties["allowed_values"] = list(ALLOWED_INSTANCE_SIZES)
        nodes.append(ConstructNode(
            kind=ResourceKind.PARAMETER,
            path=f"{stack_path}/{name}",
            properties=properties,
        ))
    return nodes


def _cluster_node(deployment_path: str, parameters: ClusterStackParameters) -> ClusterNode:
    region = AdvancedRegionConfig(
        provider_name=ProviderName.AWS,
        region_name=parameters.cluster_region,
        electable_specs=Specs(
            instance_size=parameters.instance_size,
            node_count=ELECTABLE_NODE_COUNT,
        ),
    )
    return ClusterNode(
        path=f"{deployment_path}/Cluster",
        properties=ClusterProperties(
            name=parameters.cluster_name,
            cluster_type=CLUSTER_TYPE_REPLICASET,
            mongo_db_major_version=parameters.mongo_db_major_version,
            backup_enabled=True,
            replication_specs=[
                AdvancedReplicationSpec(num_shards=1, advanced_region_configs=[region]),
            ],
        ),
    )


def build_atlas_cluster_stack(
    parameters: ClusterStackParameters,
    stage_path: str = DEFAULT_STAGE_ID,
    stack_id: str = DEFAULT_STACK_ID,
) -> ConstructNode:
    """
    Build the construct tree of one Atlas cluster stack.

    Args:
        parameters: Validated stack parameters.
        stage_path: Path of the stage that will contain the stack.
        stack_id: Identifier of the stack inside the stage.

    Returns:
        The stack node; attach it to a stage with ``build_stage_tree``.
    """
    stack_path = f"{stage_path}/{stack_id}"
    deployment_path = f"{stack_path}/AtlasDeployment"

    deployment = ConstructNode(
        kind=ResourceKind.CONSTRUCT,
        path=deployment_path,
        properties={"profile": parameters.profile_name},
        children=[
            ConstructNode(
                kind=ResourceKind.PROJECT,
                path=f"{deployment_path}/Project",
                properties={"name": parameters.project_name, "org_id": parameters.org_id},
            ),
            _cluster_node(deployment_path, parameters),
            ConstructNode(
                kind=ResourceKind.DATABASE_USER,
                path=f"{deployment_path}/DatabaseUser",
                properties={
                    "username": parameters.db_username,
                    "database_name": "admin",
                    "roles": [{"role_name": "atlasAdmin", "database_name": "admin"}],
                },
            ),
            ConstructNode(
                kind=ResourceKind.IP_ACCESS_LIST,
                path=f"{deployment_path}/IpAccessList",
                properties={
                    "access_list": [{"cidr_block": parameters.trusted_cidr, "comment": ACCESS_LIST_COMMENT}],
                },
            ),
        ],
    )

    outputs = [
        ConstructNode(
            kind=ResourceKind.OUTPUT,
            path=f"{stack_path}/AtlasProjectId",
            properties={"description": "Identifier of the provisioned Atlas project."},
        ),
        ConstructNode(
            kind=ResourceKind.OUTPUT,
            path=f"{stack_path}/AtlasClusterId",
            properties={"description": "Identifier of the provisioned Atlas cluster."},
        ),
    ]

    logger.debug(f"Built stack {stack_path} with cluster '{parameters.cluster_name}' ({parameters.instance_size})")
    return ConstructNode(
        kind=ResourceKind.STACK,
        path=stack_path,
        children=_parameter_nodes(stack_path, parameters) + [deployment] + outputs,
    )


def build_stage_tree(stacks: List[ConstructNode], stage_id: str = DEFAULT_STAGE_ID) -> ConstructNode:
    """Wrap stacks in a stage node."""
    return ConstructNode(kind=ResourceKind.STAGE, path=stage_id, children=stacks)


__all__ = [
    "PARAMETER_DESCRIPTIONS",
    "ClusterStackParameters",
    "build_atlas_cluster_stack",
    "build_stage_tree",
]
