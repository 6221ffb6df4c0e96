from typing import List, Optional


class DomainException(Exception):
    pass


class InvalidDimensionError(DomainException):
    pass


class TemplateNotFoundError(DomainException):
    pass


class PrintAreaNotFoundError(DomainException):
    pass


class UnreadableImageError(DomainException):
    pass


class InvalidVariantError(DomainException):
    def __init__(self, product_id: int, invalid_ids: List[int], valid_ids: List[int], message: Optional[str] = None):
        self.product_id = product_id
        self.invalid_ids = invalid_ids
        self.valid_ids = valid_ids
        sample = ", ".join(str(v) for v in valid_ids[:5])
        if len(valid_ids) > 5:
            sample += "..."
        super().__init__(message or (
            f"Варианты [{', '.join(str(v) for v in invalid_ids)}] не принадлежат товару {product_id}. "
            f"Допустимые варианты: [{sample}]"
        ))


class MockupSubmissionError(DomainException):
    pass


class MockupGenerationFailedError(DomainException):
    def __init__(self, job_key: str, reason: str):
        self.job_key = job_key
        self.reason = reason
        super().__init__(f"Генерация мокапа {job_key} завершилась ошибкой: {reason}")


class MockupTimeoutError(DomainException):
    def __init__(self, job_key: str, attempts: int):
        self.job_key = job_key
        self.attempts = attempts
        super().__init__(f"Мокап {job_key} не готов после {attempts} попыток")


class PaymentNotConfirmedError(DomainException):
    pass


class PaymentServiceError(DomainException):
    pass


class SupplierServiceError(DomainException):
    pass


class SupplierAPIError(SupplierServiceError):
    """Ошибка, которую вернул API поставщика"""

    def __init__(self, status_code: int, message: str, code: Optional[int] = None, payload: Optional[dict] = None):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.payload = payload or {}
        super().__init__(f"Supplier API ошибка {status_code}: {message}")

    @property
    def is_rate_limit(self) -> bool:
        return self.status_code == 429 or self.code == 429


class StorageServiceError(DomainException):
    pass


class InvalidOrderError(DomainException):
    pass


class OrderNotFoundError(DomainException):
    pass


class AccessDeniedError(DomainException):
    pass


class CustomProductNotFoundError(DomainException):
    pass
