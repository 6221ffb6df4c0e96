import io
import uuid
import httpx
import logging
from decimal import Decimal
from typing import Optional, List, Any
from PIL import Image, UnidentifiedImageError

from app.domain.models import (
    ImageDimensions, MockupFile, MockupJob, MockupTemplate,
    SupplierOrder, SupplierProduct, RefundResult
)
from app.domain.exceptions import (
    PaymentServiceError, SupplierServiceError, SupplierAPIError,
    StorageServiceError, UnreadableImageError
)
from app.infrastructure.retry import with_retry

logger = logging.getLogger(__name__)


class HTTPSupplierClient:
    """Клиент Printful API. Ответы приходят в конверте {"code": ..., "result": ...}"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._max_retries = max_retries
        self._initial_delay = initial_delay
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json"
            },
            timeout=self._timeout,
            transport=self._transport
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Printful ошибка подключения: {e}")
            raise SupplierServiceError(f"Printful не доступен: {str(e)}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"result": data}

        code = data.get("code")
        if response.status_code >= 400 or (isinstance(code, int) and code >= 400):
            error = data.get("error")
            if isinstance(error, dict):
                message = error.get("message") or response.text
            else:
                message = data.get("result") if isinstance(data.get("result"), str) else response.text
            logger.error(f"Printful {method} {path} вернул {response.status_code}: {message}")
            raise SupplierAPIError(response.status_code, str(message), code=code, payload=data)

        return data.get("result")

    async def _request_with_retry(self, method: str, path: str, **kwargs) -> Any:
        return await with_retry(
            lambda: self._request(method, path, **kwargs),
            max_retries=self._max_retries,
            initial_delay=self._initial_delay
        )

    @staticmethod
    def _expect_result(result: Any, path: str, *keys: str) -> dict:
        """Проверяет, что в конверте пришел объект result с нужными ключами"""
        if not isinstance(result, dict):
            raise SupplierAPIError(502, f"Printful {path}: пустой или некорректный result", payload={"result": result})
        missing = [key for key in keys if result.get(key) is None]
        if missing:
            raise SupplierAPIError(502, f"Printful {path}: в ответе нет полей {missing}", payload={"result": result})
        return result

    async def get_product(self, product_id: int) -> SupplierProduct:
        path = f"/products/{product_id}"
        result = self._expect_result(await self._request_with_retry("GET", path), path)
        product = result.get("product") or {}
        return SupplierProduct(id=product.get("id", product_id), variants=result.get("variants", []))

    async def get_mockup_templates(self, product_id: int) -> List[MockupTemplate]:
        path = f"/mockup-generator/templates/{product_id}"
        result = self._expect_result(await self._request_with_retry("GET", path), path)
        return [MockupTemplate(**t) for t in result.get("templates") or []]

    async def create_mockup_job(self, product_id: int, variant_ids: List[int], files: List[MockupFile]) -> str:
        body = {
            "variant_ids": variant_ids,
            "format": "jpg",
            "files": [f.model_dump(exclude_none=True) for f in files]
        }
        logger.debug(f"Mockup request body: {body}")
        path = f"/mockup-generator/create-task/{product_id}"
        result = self._expect_result(await self._request_with_retry("POST", path, json=body), path, "task_key")
        return result["task_key"]

    async def get_mockup_job_status(self, job_key: str) -> MockupJob:
        path = "/mockup-generator/task"
        result = self._expect_result(
            await self._request_with_retry("GET", path, params={"task_key": job_key}), path
        )
        return MockupJob(
            job_key=result.get("task_key", job_key),
            status=result.get("status", "pending"),
            mockup_urls=[m["mockup_url"] for m in result.get("mockups") or [] if m.get("mockup_url")],
            error=result.get("error")
        )

    async def create_order(self, payload: dict) -> SupplierOrder:
        # Создание заказа не идемпотентно: повторяем только по rate limit
        logger.info(f"Создание заказа в Printful: {payload}")
        result = self._expect_result(await self._request_with_retry("POST", "/orders", json=payload), "/orders", "id")
        return SupplierOrder(id=result["id"], status=result.get("status"), raw=result)


class HTTPPaymentsClient:
    """Клиент Stripe REST API"""

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._base_url = base_url.rstrip("/")
        self._secret_key = secret_key
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._secret_key}"},
            timeout=self._timeout,
            transport=self._transport
        )

    async def confirm_payment(self, payment_intent_id: str) -> bool:
        try:
            async with self._client() as client:
                response = await client.get(f"/v1/payment_intents/{payment_intent_id}")
        except httpx.RequestError as e:
            logger.error(f"Payment service ошибка подключения: {e}")
            raise PaymentServiceError(f"Payment service не доступен: {str(e)}")

        if response.status_code == 404:
            logger.warning(f"Payment intent {payment_intent_id} не найден")
            return False
        if response.status_code != 200:
            raise PaymentServiceError(f"Payment service ошибка: {response.status_code}")

        status = response.json().get("status")
        logger.info(f"Payment intent {payment_intent_id} status: {status}")
        return status == "succeeded"

    async def refund_payment(self, payment_intent_id: str, amount: Optional[Decimal] = None) -> RefundResult:
        data = {"payment_intent": payment_intent_id}
        if amount is not None:
            # Stripe принимает сумму в центах
            data["amount"] = str(int((amount * 100).to_integral_value()))
        logger.info(f"Возврат по payment intent {payment_intent_id}" + (f" сумма {amount}" if amount is not None else " (полный)"))

        try:
            async with self._client() as client:
                response = await client.post(
                    "/v1/refunds",
                    data=data,
                    headers={"Idempotency-Key": f"refund_{payment_intent_id}"}
                )
        except httpx.RequestError as e:
            logger.error(f"Payment service ошибка подключения: {e}")
            raise PaymentServiceError(f"Payment service не доступен: {str(e)}")

        if response.status_code != 200:
            raise PaymentServiceError(f"Не удалось выполнить возврат: {response.status_code} - {response.text}")

        body = response.json()
        logger.info(f"Возврат создан: {body.get('id')}, status: {body.get('status')}")
        return RefundResult(id=body["id"], status=body.get("status", "pending"), amount=body.get("amount"))


class HTTPStorageClient:
    """Загрузка файлов в Google Cloud Storage через JSON API"""

    def __init__(
        self,
        upload_url: str,
        public_url: str,
        bucket_name: str,
        access_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._upload_url = upload_url.rstrip("/")
        self._public_url = public_url.rstrip("/")
        self._bucket_name = bucket_name
        self._access_token = access_token
        self._timeout = timeout
        self._transport = transport

    async def upload_buffer(self, data: bytes, mime_type: str, folder: str) -> str:
        extension = "png" if "png" in mime_type else "jpg"
        object_name = f"{folder}/{uuid.uuid4().hex}.{extension}"
        logger.info(f"Загрузка файла в GCS: {object_name}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self._upload_url}/b/{self._bucket_name}/o",
                    params={"uploadType": "media", "name": object_name},
                    content=data,
                    headers={
                        "Authorization": f"Bearer {self._access_token}",
                        "Content-Type": mime_type,
                        "Cache-Control": "public, max-age=31536000"
                    }
                )
        except httpx.RequestError as e:
            logger.error(f"GCS ошибка подключения: {e}")
            raise StorageServiceError(f"GCS не доступен: {str(e)}")

        if response.status_code not in (200, 201):
            raise StorageServiceError(f"GCS ошибка: {response.status_code} - {response.text}")

        public_url = f"{self._public_url}/{self._bucket_name}/{object_name}"
        logger.info(f"Файл загружен: {public_url}")
        return public_url


class HTTPImageProber:
    """Скачивает изображение целиком и читает его размеры через Pillow"""

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._timeout = timeout
        self._transport = transport

    async def probe_dimensions(self, image_url: str) -> ImageDimensions:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport, follow_redirects=True) as client:
                response = await client.get(image_url)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UnreadableImageError(f"Не удалось скачать изображение {image_url}: {str(e)}")

        try:
            with Image.open(io.BytesIO(response.content)) as image:
                width, height = image.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise UnreadableImageError(f"Не удалось прочитать изображение {image_url}: {str(e)}")

        if not width or not height:
            raise UnreadableImageError(f"Изображение {image_url} имеет нулевой размер")

        logger.info(f"Размеры изображения: {width}x{height}")
        return ImageDimensions(width=width, height=height)
