"""
Workflow State Machine — 拍照 → 识别 → 修正 → 提交 的流程编排。

状态：
  Home                                初始状态；commit / cancel 之后回到这里
  Extracting(token, image)            等外部识别服务返回
  Correcting(draft, image, raw)       用户修正识别结果
  Error(message, code)                识别失败，acknowledge 后回 Home

唯一的"挂起点"是外部识别调用。每次 submit_image() 分配一个递增 token，
识别结果必须带着 token 回来；token 对不上（用户已取消、或已经进入下一轮）就直接丢弃。

所有公共方法都在同一把 RLock 下执行：识别结果由后台线程投递，
与 HTTP 请求线程并发；commit 的 append 和库存投影对外表现为原子操作。
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .exceptions import BaseAppException, IllegalTransition, InvalidExtractionShape, ValidationFailed
from .intake import ExtractionDraft, set_field, to_draft, validate
from .inventory import active_inventory
from .models import ImagePayload, Medication, Prescription

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


# ── 状态 ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Home:
    name = "home"


@dataclass(frozen=True)
class Extracting:
    token: int
    image: ImagePayload = field(repr=False)
    name = "extracting"


@dataclass(frozen=True)
class Correcting:
    draft: ExtractionDraft
    image: ImagePayload = field(repr=False)
    raw: Any = field(default=None, repr=False)   # 原始识别结果，只读，供对照
    name = "correcting"


@dataclass(frozen=True)
class Error:
    message: str
    code: str = "EXTRACTION_FAILED"
    name = "error"


HOME = Home()


class PrescriptionWorkflow:

    def __init__(self, id_factory: Optional[Callable[[], str]] = None, strict: bool = True):
        """
        Args:
            id_factory: 生成 Prescription / Medication id 的函数，默认 UUID4。测试可注入确定性 id。
            strict:     True  → 非法调用抛 IllegalTransition
                        False → 非法调用只记 warning，返回 None，状态不变
        """
        self._id_factory = id_factory or new_id
        self._strict = strict
        self._state = HOME
        self._history: list[Prescription] = []
        self._token = 0
        self._lock = threading.RLock()

    # ── 只读 ───────────────────────────────────────────────────────────────

    @property
    def state(self):
        with self._lock:
            return self._state

    @property
    def history(self) -> tuple[Prescription, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def current_token(self) -> int:
        with self._lock:
            return self._token

    def inventory(self, today):
        with self._lock:
            return active_inventory(self._history, today)

    def snapshot(self, today):
        """同一把锁下取 (history, inventory)，两者一定对应同一份历史。"""
        with self._lock:
            history = tuple(self._history)
            return history, active_inventory(history, today)

    # ── 内部 ───────────────────────────────────────────────────────────────

    def _illegal(self, operation: str):
        message = f"{operation}() is not allowed in state {self._state.name!r}."
        if self._strict:
            raise IllegalTransition(
                message=message,
                detail={"operation": operation, "state": self._state.name},
            )
        logger.warning("[Workflow] 忽略非法调用: %s", message)
        return None

    def _is_current(self, token: int) -> bool:
        return isinstance(self._state, Extracting) and self._state.token == token

    # ── 状态迁移 ───────────────────────────────────────────────────────────

    def submit_image(self, image: ImagePayload) -> Optional[int]:
        """Home / Error → Extracting。返回本次识别请求的 token。"""
        with self._lock:
            if not isinstance(self._state, (Home, Error)):
                return self._illegal("submit_image")

            self._token += 1
            self._state = Extracting(token=self._token, image=image)
            logger.info("[Workflow] 提交图片，token=%d", self._token)
            return self._token

    def extraction_succeeded(self, token: int, raw: Any) -> bool:
        """
        Extracting → Correcting。

        token 过期时什么都不做，返回 False。
        结构不合法的结果（InvalidExtractionShape）转为 Error。
        """
        with self._lock:
            if not self._is_current(token):
                logger.warning("[Workflow] 丢弃过期的识别结果 token=%s (state=%s)", token, self._state.name)
                return False

            image = self._state.image
            try:
                draft = to_draft(raw)
            except InvalidExtractionShape as exc:
                logger.warning("[Workflow] 识别结果结构不合法 token=%d: %s", token, exc.message)
                self._state = Error(message=exc.message, code=exc.code)
                return True

            self._state = Correcting(draft=draft, image=image, raw=raw)
            logger.info("[Workflow] 识别完成 token=%d，药品数=%d", token, len(draft.medications))
            return True

    def extraction_failed(self, token: int, reason) -> bool:
        """Extracting → Error。reason 可以是字符串或 ExtractionFailure。"""
        with self._lock:
            if not self._is_current(token):
                logger.warning("[Workflow] 丢弃过期的识别失败 token=%s (state=%s)", token, self._state.name)
                return False

            if isinstance(reason, BaseAppException):
                self._state = Error(message=reason.message, code=reason.code)
            else:
                self._state = Error(message=str(reason))
            logger.warning("[Workflow] 识别失败 token=%d: %s", token, self._state.message)
            return True

    def acknowledge_error(self):
        """Error → Home。"""
        with self._lock:
            if not isinstance(self._state, Error):
                return self._illegal("acknowledge_error")
            self._state = HOME
            return self._state

    def edit(self, medication_index: Optional[int], field_name: str, value: Any) -> Optional[ExtractionDraft]:
        """Correcting → Correcting，替换一个字段。OutOfRange / ValidationError 时状态不变。"""
        with self._lock:
            if not isinstance(self._state, Correcting):
                return self._illegal("edit")

            draft = set_field(self._state.draft, medication_index, field_name, value)
            self._state = Correcting(draft=draft, image=self._state.image, raw=self._state.raw)
            return draft

    def cancel(self):
        """
        Correcting → Home：丢弃 draft 和图片。
        Extracting → Home：不中断底层调用，只是让它的 token 过期。
        """
        with self._lock:
            if not isinstance(self._state, (Correcting, Extracting)):
                return self._illegal("cancel")
            logger.info("[Workflow] 取消（state=%s）", self._state.name)
            self._state = HOME
            return self._state

    def commit(self) -> Optional[Prescription]:
        """
        Correcting → Home，draft 变成带 id 的 Prescription 并追加到 history。

        Raises:
            ValidationFailed: draft 校验不通过；状态保持 Correcting，数据原样保留
        """
        with self._lock:
            if not isinstance(self._state, Correcting):
                return self._illegal("commit")

            draft = self._state.draft
            report = validate(draft)
            if not report.ok:
                raise ValidationFailed(
                    message="Prescription has invalid fields; fix them and save again.",
                    detail={
                        "errors": [e.as_dict() for e in report.errors],
                        "warnings": [w.as_dict() for w in report.warnings],
                    },
                )

            prescription = Prescription(
                id=self._id_factory(),
                prescription_date=draft.prescription_date,
                medications=[
                    Medication(
                        id=self._id_factory(),
                        name=med.name,
                        usage=med.usage,
                        days=med.days,
                        dosage=med.dosage,
                    )
                    for med in draft.medications
                ],
                original_image=self._state.image,
            )

            self._history.append(prescription)
            self._state = HOME
            logger.info(
                "[Workflow] 已保存处方 id=%s date=%s，药品数=%d",
                prescription.id, prescription.prescription_date, len(prescription.medications),
            )
            return prescription
