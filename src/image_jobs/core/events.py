"""
Unwrapping of storage-write notifications.

A worker can receive the same S3 event in several envelopes:

  - a raw S3 event:            {"Records": [{"s3": {...}}]}
  - an SNS delivery:           {"Records": [{"Sns": {"Message": "<json S3 event>"}}]}
  - an SQS delivery of SNS:    {"Records": [{"eventSource": "aws:sqs", "body": "<json SNS envelope>"}]}
  - an SQS delivery of S3:     {"Records": [{"eventSource": "aws:sqs", "body": "<json S3 event>"}]}

``iter_s3_records`` peels every layer down to the S3 records; S3 test events
(``"Event": "s3:TestEvent"``) carry no records and yield nothing.
"""

import json
import urllib.parse
from typing import Any, Dict, Iterator, Tuple

from .models import ObjectRef


def _loads(payload: Any) -> Any:
    if isinstance(payload, (str, bytes)):
        return json.loads(payload)
    return payload


def _record_to_ref(record: Dict[str, Any]) -> ObjectRef:
    s3_info = record.get("s3", {})
    bucket = s3_info.get("bucket", {}).get("name", "")
    key = urllib.parse.unquote_plus(s3_info.get("object", {}).get("key", ""))
    if not bucket or not key:
        raise ValueError("S3 notification record is missing bucket or key")
    return ObjectRef(bucket=bucket, key=key)


def iter_s3_records(event: Any) -> Iterator[Tuple[Dict[str, Any], ObjectRef]]:
    """Yield each innermost S3 record with the object it names."""
    event = _loads(event)
    if not isinstance(event, dict):
        return

    # SNS envelope as delivered inside an SQS body
    if "Message" in event and "Records" not in event:
        yield from iter_s3_records(event["Message"])
        return

    for record in event.get("Records", []):
        if "s3" in record:
            yield record, _record_to_ref(record)
        elif record.get("eventSource") == "aws:sqs":
            yield from iter_s3_records(record.get("body", "{}"))
        elif "Sns" in record:
            yield from iter_s3_records(record["Sns"].get("Message", "{}"))


def is_raw_s3_event(event: Any) -> bool:
    """True when every record is an S3 record, with no SNS or SQS envelope around it."""
    records = event.get("Records") if isinstance(event, dict) else None
    return bool(records) and all("s3" in record for record in records)
