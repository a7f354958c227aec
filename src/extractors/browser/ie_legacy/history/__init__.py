"""Internet Explorer History extractor (index.dat via pasco2)."""

from .extractor import IEHistoryExtractor

# Registry expects IeLegacyHistoryExtractor (family_artifact pattern)
IeLegacyHistoryExtractor = IEHistoryExtractor

__all__ = ['IEHistoryExtractor', 'IeLegacyHistoryExtractor']
