"""
Core modules for the CRISP bootstrap.

Submodules are imported directly (``from crisp_bootstrap.core.orchestrator
import BootstrapOrchestrator``); ``config.settings`` depends on this package.
"""
