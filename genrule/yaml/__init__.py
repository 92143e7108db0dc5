"""YAML-based module declarations for genrule.

This module provides a declarative YAML format for genrule, gensrcs and
host_tool modules, and a CLI that writes the generated actions as a ninja
file.

Example genrule.yaml:
    config:
      build_dir: out

    modules:
      - type: host_tool
        name: protoc
        src: prebuilts/protoc

      - type: gensrcs
        name: api_protos
        tools: [protoc]
        srcs: ["api/*.proto"]
        output_extension: .pb.go
        cmd: "$(location) --go_out=$(genDir) $(in)"

Usage:
    from genrule.yaml import run_yaml
    result = run_yaml('genrule.yaml')

CLI:
    python -m genrule.yaml genrule.yaml -o build.ninja
"""

from .parser import parse_yaml_file, parse_yaml_string, load_yaml_tree, YAMLConfig, YAMLParseError
from .converter import yaml_to_module, yaml_to_modules, yaml_to_graph
from .runner import run_yaml, main

__all__ = [
    'parse_yaml_file',
    'parse_yaml_string',
    'load_yaml_tree',
    'YAMLConfig',
    'YAMLParseError',
    'yaml_to_module',
    'yaml_to_modules',
    'yaml_to_graph',
    'run_yaml',
    'main',
]
