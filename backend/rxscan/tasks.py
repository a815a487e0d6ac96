import logging
import threading

from .exceptions import ExtractionFailure

logger = logging.getLogger(__name__)


def run_extraction(workflow, token: int, image, service=None) -> bool:
    """
    执行一次识别，并把结果带着 token 投递回 workflow。

    不重试：失败直接进 Error，由用户重新提交图片。
    token 过期（用户已取消）时 workflow 会丢弃结果，这里返回 False。
    """
    from .services import extract_prescription

    logger.info("[Extraction] 开始处理 token=%d", token)

    try:
        response = extract_prescription(image, service=service)
    except ExtractionFailure as exc:
        logger.warning("[Extraction] token=%d 处理失败: %s (%s)", token, exc.message, exc.code)
        return workflow.extraction_failed(token, exc)

    return workflow.extraction_succeeded(token, response.payload)


def dispatch_extraction(workflow, image, service=None):
    """
    在请求线程上 submit_image()（非法状态会在这里直接抛 IllegalTransition），
    然后开后台线程跑识别，立即返回 token。
    """
    token = workflow.submit_image(image)
    if token is None:
        # lenient 模式下非法调用被忽略
        return None

    thread = threading.Thread(
        target=run_extraction,
        args=(workflow, token, image),
        kwargs={"service": service},
        name=f"rxscan-extraction-{token}",
    )
    thread.daemon = True
    thread.start()
    return token
