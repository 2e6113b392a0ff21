from .token import (
    CurveState,
    CurveProgress,
    TokenMetadata,
    HolderRecord,
    HolderDistribution,
    Trade,
    VolumePeriod,
    VolumeResult,
)
from .research import ResearchStatus, ResearchStep

__all__ = [
    'CurveState',
    'CurveProgress',
    'TokenMetadata',
    'HolderRecord',
    'HolderDistribution',
    'Trade',
    'VolumePeriod',
    'VolumeResult',
    'ResearchStatus',
    'ResearchStep',
]
