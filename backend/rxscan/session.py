"""
进程内唯一的 workflow（单用户，无持久化）。

views 通过 get_workflow() 取用；测试用 reset_workflow() 清空。
"""

import threading

from django.conf import settings

from .workflow import PrescriptionWorkflow

_workflow = None
_lock = threading.Lock()


def get_workflow() -> PrescriptionWorkflow:
    global _workflow
    with _lock:
        if _workflow is None:
            _workflow = PrescriptionWorkflow(strict=getattr(settings, "WORKFLOW_STRICT", True))
        return _workflow


def reset_workflow(workflow=None) -> None:
    global _workflow
    with _lock:
        _workflow = workflow
