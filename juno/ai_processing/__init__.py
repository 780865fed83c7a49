"""
AI Processing module for Juno Outreach.

This module provides the rule-based job classifier, the LLM-backed classifier
and the LLM provider layer.
"""

from .job_classifier import (
    ClassificationResult,
    AnalysisStats,
    ExperienceRequirement,
    KeywordRules,
    get_default_rules,
    extract_experience_years,
    decide,
    classify,
    classify_all,
    get_analysis_stats
)

from .llm_manager import (
    LLMManager,
    LLMProvider,
    LLMResponse,
    GeminiProvider,
    OpenRouterProvider,
    get_llm_manager
)

from .llm_classifier import (
    LLMJobClassifier,
    LLMError,
    RateLimitError,
    build_profile_prompt,
    build_analysis_prompt
)

__all__ = [
    'ClassificationResult',
    'AnalysisStats',
    'ExperienceRequirement',
    'KeywordRules',
    'get_default_rules',
    'extract_experience_years',
    'decide',
    'classify',
    'classify_all',
    'get_analysis_stats',
    'LLMManager',
    'LLMProvider',
    'LLMResponse',
    'GeminiProvider',
    'OpenRouterProvider',
    'get_llm_manager',
    'LLMJobClassifier',
    'LLMError',
    'RateLimitError',
    'build_profile_prompt',
    'build_analysis_prompt'
]
