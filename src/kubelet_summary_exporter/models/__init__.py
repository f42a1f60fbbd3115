from .summary import NodeRef, PodRef, PodStats, Summary, VolumeStats, parse_summary

__all__ = ["NodeRef", "PodRef", "PodStats", "Summary", "VolumeStats", "parse_summary"]
