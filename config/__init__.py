"""Configuration management for the vote prover."""

from .config import SystemConfig, ProverConfig, load_config, save_config

__all__ = ['SystemConfig', 'ProverConfig', 'load_config', 'save_config']
