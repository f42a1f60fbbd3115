# src/kubelet_summary_exporter/models/summary.py
"""
Pydantic models for the subset of the kubelet ``/stats/summary`` document
the exporter reads. Unknown fields are ignored so newer kubelets keep
decoding; fields the exporter does not use (capacity, inodes, volumes,
containers) are simply not declared.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class _SummaryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value, info: ValidationInfo):
        # A JSON null leaves the field at its zero value.
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


class NodeRef(_SummaryModel):
    """The node section of the summary."""

    node_name: str = Field("", alias="nodeName", strict=True)


class PodRef(_SummaryModel):
    """
    Identifies the pod a stats entry belongs to.

    Example::

        "podRef": {"name": "configs-service-59c9c7586b-5jchj", "namespace": "onprem", "uid": "..."}
    """

    name: str = Field("", strict=True)
    namespace: str = Field("", strict=True)


class VolumeStats(_SummaryModel):
    """
    Filesystem usage of a volume, here the pod's ephemeral storage.

    Example::

        {"time": "2019-11-25T20:33:19Z", "availableBytes": 25674719232,
         "capacityBytes": 25674731520, "usedBytes": 12288, "inodesFree": 6268236,
         "inodes": 6268245, "inodesUsed": 9}
    """

    used_bytes: int = Field(0, alias="usedBytes", strict=True, ge=INT64_MIN, le=INT64_MAX)
    available_bytes: int = Field(0, alias="availableBytes", strict=True, ge=INT64_MIN, le=INT64_MAX)


class PodStats(_SummaryModel):
    """Stats for a single pod."""

    pod_ref: PodRef = Field(default_factory=PodRef, alias="podRef")
    ephemeral_storage: Optional[VolumeStats] = Field(None, alias="ephemeral-storage")


class Summary(_SummaryModel):
    """Root of the ``/stats/summary`` response."""

    node: NodeRef = Field(default_factory=NodeRef)
    # Entries may be null; they are skipped when metrics are emitted.
    pods: List[Optional[PodStats]] = Field(default_factory=list)


def parse_summary(body: bytes) -> Summary:
    """
    Decodes a ``/stats/summary`` payload.

    Raises:
        pydantic.ValidationError: If the payload is not valid JSON or does not match the schema.
    """
    return Summary.model_validate_json(body)
