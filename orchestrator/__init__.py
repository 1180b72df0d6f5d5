"""
Orchestrator Package - Metrics Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
Single entry point for every analytic operation of the
wellbeing analytics engine.

============================================================
CORE PRINCIPLES
============================================================
1. The orchestrator has NO scoring or statistics logic
2. Invalid data is dropped with a reason, never silently
3. A data store outage yields a documented default payload
4. Cache, data store and clock are injected explicitly

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                 MetricsOrchestrator                 |
    |-----------------------------------------------------|
    |  DataStore       |  rows (timeout + retry)          |
    |  Normalizer      |  rows -> responses               |
    |  ScoreEngine     |  answers -> score                |
    |  RiskClassifier  |  score -> band                   |
    |  Correlation     |  variable pairs                  |
    |  Segmentation    |  segments, heatmap, trends       |
    |  MetricsCache    |  TTL + LRU + singleflight        |
    +-----------------------------------------------------+

============================================================
QUICK START
============================================================
Command line usage::

    python -m orchestrator.cli core_metrics --rows rows.json
    python -m orchestrator.cli segmentation --rows rows.json --group-by shift

Programmatic usage::

    import asyncio
    from data_ingestion import InMemoryDataStore
    from metrics_cache import MetricsCache
    from orchestrator import MetricsOrchestrator

    async def main():
        store = InMemoryDataStore({"respuestas_cuestionario": rows})
        orchestrator = MetricsOrchestrator(store, MetricsCache())
        orchestrator.register_error_channel(print)

        result = await orchestrator.get_core_metrics({"department": "Operations"})
        print(result.to_dict())

    asyncio.run(main())

============================================================
EXPORTS
============================================================
"""

# ============================================================
# Models
# ============================================================
from orchestrator.models import (
    # Enums
    MetricsOperation,

    # Configuration
    OrchestratorConfig,

    # Results
    ResultMetadata,
    Diagnostics,
    MetricsResult,
    ErrorReport,
)

# ============================================================
# Defaults
# ============================================================
from orchestrator.defaults import default_payload

# ============================================================
# Core
# ============================================================
from orchestrator.core import (
    # Main orchestrator
    MetricsOrchestrator,

    # Factory function
    create_orchestrator,

    # Logging setup
    setup_logging,
)

# ============================================================
# CLI
# ============================================================
from orchestrator.cli import (
    create_parser,
    validate_args,
    build_config,
    print_banner,
    main,
    async_main,
)

# ============================================================
# Package metadata
# ============================================================
__version__ = "0.1.0"

__all__ = [
    # Models
    "MetricsOperation",
    "OrchestratorConfig",
    "ResultMetadata",
    "Diagnostics",
    "MetricsResult",
    "ErrorReport",

    # Defaults
    "default_payload",

    # Core
    "MetricsOrchestrator",
    "create_orchestrator",
    "setup_logging",

    # CLI
    "create_parser",
    "validate_args",
    "build_config",
    "print_banner",
    "main",
    "async_main",
]
