import os
from typing import Final

DEFAULT_NAMESPACE: Final = os.environ.get("JOB_DISPATCH_NAMESPACE", "default")
DEFAULT_TAG: Final = os.environ.get("JOB_DISPATCH_TAG", "manual")
DEFAULT_BACKOFF_LIMIT: Final = 3

# Job names end up in the `job-name` pod label, so they follow the DNS-1123 label rule.
MAX_JOB_NAME_LENGTH: Final = 63

MANAGED_BY: Final = "job-dispatch"
LABEL_MANAGED_BY: Final = "app.kubernetes.io/managed-by"
LABEL_SOURCE_KIND: Final = "job-dispatch/source-kind"
LABEL_SOURCE_NAME: Final = "job-dispatch/source-name"
ANNOTATION_SOURCE: Final = "job-dispatch/source"
ANNOTATION_CRONJOB_INSTANTIATE: Final = "cronjob.kubernetes.io/instantiate"

CONTROLLER_LABELS: Final = (
    "controller-uid",
    "batch.kubernetes.io/controller-uid",
    "job-name",
    "batch.kubernetes.io/job-name",
)

ONE_SHOT_RESTART_POLICIES: Final = ("OnFailure", "Never")
DEFAULT_RESTART_POLICY: Final = "Never"
