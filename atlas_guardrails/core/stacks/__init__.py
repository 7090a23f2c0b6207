"""
Atlas cluster stack builder and its parameter files.
"""

from .parameters import (
    ParameterFileError,
    load_parameter_file,
    parse_parameters,
    to_deploy_arguments,
)
from .atlas_cluster_stack import (
    ClusterStackParameters,
    build_atlas_cluster_stack,
    build_stage_tree,
)

__all__ = [
    "ParameterFileError",
    "load_parameter_file",
    "parse_parameters",
    "to_deploy_arguments",
    "ClusterStackParameters",
    "build_atlas_cluster_stack",
    "build_stage_tree",
]
