"""
API - Testbed configuration interface

- config_parser.py: 配置解析器
"""

from .config_parser import TestbedConfig

__all__ = [
    'TestbedConfig',
]
