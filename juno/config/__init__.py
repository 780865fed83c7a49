"""
Configuration module for Juno Outreach.

This module provides application, LLM, processing and classifier configuration.
"""

from .settings import (
    ConfigManager,
    AppConfig,
    LLMConfig,
    ProcessingConfig,
    ClassifierConfig,
    get_config,
    get_llm_config,
    get_processing_config,
    get_classifier_config,
    validate_config,
    config_manager
)

__all__ = [
    'ConfigManager',
    'AppConfig',
    'LLMConfig',
    'ProcessingConfig',
    'ClassifierConfig',
    'get_config',
    'get_llm_config',
    'get_processing_config',
    'get_classifier_config',
    'validate_config',
    'config_manager'
]
