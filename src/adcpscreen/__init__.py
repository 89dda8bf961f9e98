"""`adcpscreen` - per-configuration screening of ADCP ensemble streams.

Subpackages:
- ensemble: Frame records, configuration keys, coordinate transforms, playback
- screen: Individual screening corrections (heading, 3-beam, retransform, ...)
- pipeline: Correction pipeline, configuration registry, router, orchestrator
- contracts: Fail-fast frame and stage-order checks
- schemas: Pydantic configuration layers
"""

__version__ = "0.1.0"
