from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.config import settings
from app.database import get_session_factory
from app.domain.models import OrderItem
from app.presentation.schemas import (
    CreateOrderRequest, OrderResponse, ErrorResponse,
    SubmitMockupRequest, SubmitMockupResponse,
    GenerateMockupRequest, GenerateMockupResponse, MockupStatusResponse,
    CalculatePositionRequest, CalculatePositionResponse,
    CreateCustomProductRequest, UpdateCustomProductRequest, CustomProductResponse
)
from app.application.create_order import CreateOrderUseCase, CreateOrderDTO
from app.application.fulfill_order import FulfillOrderUseCase
from app.application.get_order import GetOrderUseCase, ListUserOrdersUseCase
from app.application.resolve_print_area import ResolvePrintAreaUseCase
from app.application.calculate_position import CalculatePositionUseCase, CalculatePositionDTO
from app.application.submit_mockup import SubmitMockupJobUseCase, SubmitMockupDTO
from app.application.await_mockup import AwaitMockupCompletionUseCase, GetMockupStatusUseCase
from app.application.generate_mockup import GenerateMockupUseCase, GenerateMockupDTO
from app.application.custom_products import (
    CreateCustomProductUseCase, CreateCustomProductDTO, GetCustomProductUseCase,
    ListCustomProductsUseCase, UpdateCustomProductUseCase, UpdateCustomProductDTO, DeleteCustomProductUseCase
)
from app.domain.exceptions import (
    InvalidOrderError, PaymentNotConfirmedError, PaymentServiceError,
    OrderNotFoundError, AccessDeniedError, CustomProductNotFoundError,
    InvalidDimensionError, InvalidVariantError, TemplateNotFoundError, PrintAreaNotFoundError,
    UnreadableImageError, MockupSubmissionError, MockupGenerationFailedError, MockupTimeoutError,
    SupplierServiceError
)
from app.infrastructure.background import BackgroundTaskRunner
from app.infrastructure.unit_of_work import UnitOfWork
from app.infrastructure.http_clients import (
    HTTPSupplierClient, HTTPPaymentsClient, HTTPStorageClient, HTTPImageProber
)

router = APIRouter()


# Клиенты и инфраструктура
def get_unit_of_work():
    return UnitOfWork(get_session_factory())


def get_supplier():
    return HTTPSupplierClient(
        settings.PRINTFUL_BASE_URL,
        settings.PRINTFUL_API_KEY,
        timeout=settings.HTTP_TIMEOUT,
        max_retries=settings.RETRY_MAX_RETRIES,
        initial_delay=settings.RETRY_INITIAL_DELAY
    )


def get_payments():
    return HTTPPaymentsClient(settings.STRIPE_BASE_URL, settings.STRIPE_SECRET_KEY, timeout=settings.HTTP_TIMEOUT)


def get_storage():
    return HTTPStorageClient(
        settings.GCS_UPLOAD_URL,
        settings.GCS_PUBLIC_URL,
        settings.GCS_BUCKET_NAME,
        settings.GCS_ACCESS_TOKEN,
        timeout=settings.HTTP_TIMEOUT
    )


def get_image_prober():
    return HTTPImageProber(timeout=settings.HTTP_TIMEOUT)


def get_background(request: Request) -> BackgroundTaskRunner:
    return request.app.state.background


# Фабрики для создания use cases
def get_create_order_use_case(
    uow=Depends(get_unit_of_work),
    supplier=Depends(get_supplier),
    payments=Depends(get_payments),
    storage=Depends(get_storage),
    background: BackgroundTaskRunner = Depends(get_background)
):
    fulfill = FulfillOrderUseCase(uow, supplier, payments, storage, timeout=settings.FULFILLMENT_TIMEOUT)
    return CreateOrderUseCase(uow, payments, fulfill, background)


def get_get_order_use_case(uow=Depends(get_unit_of_work)):
    return GetOrderUseCase(uow)


def get_list_orders_use_case(uow=Depends(get_unit_of_work)):
    return ListUserOrdersUseCase(uow)


def get_calculate_position_use_case(supplier=Depends(get_supplier)):
    return CalculatePositionUseCase(ResolvePrintAreaUseCase(supplier))


def get_submit_mockup_use_case(
    supplier=Depends(get_supplier),
    storage=Depends(get_storage),
    prober=Depends(get_image_prober),
    calculate_position: CalculatePositionUseCase = Depends(get_calculate_position_use_case)
):
    return SubmitMockupJobUseCase(supplier, storage, prober, calculate_position)


def get_mockup_status_use_case(supplier=Depends(get_supplier)):
    return GetMockupStatusUseCase(supplier)


def get_await_mockup_use_case(supplier=Depends(get_supplier)):
    return AwaitMockupCompletionUseCase(
        supplier,
        max_attempts=settings.MOCKUP_MAX_ATTEMPTS,
        interval=settings.MOCKUP_POLL_INTERVAL
    )


def get_generate_mockup_use_case(
    uow=Depends(get_unit_of_work),
    supplier=Depends(get_supplier),
    prober=Depends(get_image_prober),
    calculate_position: CalculatePositionUseCase = Depends(get_calculate_position_use_case),
    submit_mockup: SubmitMockupJobUseCase = Depends(get_submit_mockup_use_case),
    await_mockup: AwaitMockupCompletionUseCase = Depends(get_await_mockup_use_case)
):
    return GenerateMockupUseCase(uow, supplier, prober, calculate_position, submit_mockup, await_mockup)


def get_create_custom_product_use_case(uow=Depends(get_unit_of_work)):
    return CreateCustomProductUseCase(uow)


def get_get_custom_product_use_case(uow=Depends(get_unit_of_work)):
    return GetCustomProductUseCase(uow)


def get_list_custom_products_use_case(uow=Depends(get_unit_of_work)):
    return ListCustomProductsUseCase(uow)


def get_update_custom_product_use_case(uow=Depends(get_unit_of_work)):
    return UpdateCustomProductUseCase(uow)


def get_delete_custom_product_use_case(uow=Depends(get_unit_of_work)):
    return DeleteCustomProductUseCase(uow)


# Заказы
@router.post(
    "/orders",
    response_model=OrderResponse,
    responses={
        400: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        503: {"model": ErrorResponse}
    },
    status_code=status.HTTP_201_CREATED
)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case)
):
    """Создать заказ. Отправка поставщику идет в фоне, заказ возвращается в статусе pending"""
    try:
        dto = CreateOrderDTO(
            user_id=request.user_id,
            recipient=request.recipient,
            items=[OrderItem(**item.model_dump()) for item in request.items],
            shipping_method=request.shipping_method,
            shipping_cost=request.shipping_cost,
            tax_amount=request.tax_amount,
            payment_intent_id=request.payment_intent_id
        )
        order = await use_case(dto)
        return OrderResponse.from_domain(order)

    except InvalidOrderError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PaymentNotConfirmedError as e:
        raise HTTPException(status_code=402, detail=str(e))
    except PaymentServiceError as e:
        raise HTTPException(status_code=503, detail=f"Service unavailable: {str(e)}")


@router.get("/orders", response_model=List[OrderResponse])
async def list_orders(
    user_id: str,
    use_case: ListUserOrdersUseCase = Depends(get_list_orders_use_case)
):
    """Заказы пользователя, новые первыми"""
    orders = await use_case(user_id)
    return [OrderResponse.from_domain(order) for order in orders]


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def get_order(
    order_id: str,
    user_id: str,
    use_case: GetOrderUseCase = Depends(get_get_order_use_case)
):
    """Получить заказ по ID"""
    try:
        order = await use_case(user_id, order_id)
        return OrderResponse.from_domain(order)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Заказ не найден")
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Нет доступа к заказу")


# Мокапы
@router.post(
    "/mockups",
    response_model=SubmitMockupResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    status_code=status.HTTP_202_ACCEPTED
)
async def submit_mockup(
    request: SubmitMockupRequest,
    use_case: SubmitMockupJobUseCase = Depends(get_submit_mockup_use_case)
):
    """Создать задачу генерации мокапа. Статус: GET /mockups/{job_key}"""
    try:
        job_key = await use_case(SubmitMockupDTO(**request.model_dump()))
        return SubmitMockupResponse(job_key=job_key)
    except InvalidVariantError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MockupSubmissionError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post(
    "/mockups/generate",
    response_model=GenerateMockupResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse}
    }
)
async def generate_mockup(
    request: GenerateMockupRequest,
    use_case: GenerateMockupUseCase = Depends(get_generate_mockup_use_case)
):
    """Сгенерировать мокап и дождаться результата"""
    try:
        result = await use_case(GenerateMockupDTO(**request.model_dump()))
        return GenerateMockupResponse(**result.model_dump())
    except (InvalidVariantError, InvalidDimensionError, UnreadableImageError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except (CustomProductNotFoundError, TemplateNotFoundError, PrintAreaNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MockupTimeoutError as e:
        raise HTTPException(status_code=504, detail=f"{str(e)}. Повторите запрос статуса по job_key {e.job_key}")
    except (MockupSubmissionError, MockupGenerationFailedError, SupplierServiceError) as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get(
    "/mockups/{job_key}",
    response_model=MockupStatusResponse,
    responses={502: {"model": ErrorResponse}}
)
async def get_mockup_status(
    job_key: str,
    use_case: GetMockupStatusUseCase = Depends(get_mockup_status_use_case)
):
    """Статус задачи мокапа"""
    try:
        job = await use_case(job_key)
        return MockupStatusResponse(**job.model_dump())
    except SupplierServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post(
    "/mockups/position",
    response_model=CalculatePositionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}
)
async def calculate_position(
    request: CalculatePositionRequest,
    use_case: CalculatePositionUseCase = Depends(get_calculate_position_use_case)
):
    """Рассчитать позицию дизайна в области печати товара"""
    try:
        result = await use_case(CalculatePositionDTO(**request.model_dump()))
        return CalculatePositionResponse(
            position=result.position,
            print_area_placement=result.print_area.placement,
            print_area_width=result.print_area.width,
            print_area_height=result.print_area.height,
            aspect_ratio=result.aspect_ratio
        )
    except InvalidDimensionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TemplateNotFoundError, PrintAreaNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SupplierServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))


# Товары пользователя
@router.post(
    "/custom-products",
    response_model=CustomProductResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_custom_product(
    request: CreateCustomProductRequest,
    use_case: CreateCustomProductUseCase = Depends(get_create_custom_product_use_case)
):
    product = await use_case(CreateCustomProductDTO(**request.model_dump()))
    return CustomProductResponse.from_domain(product)


@router.get(
    "/custom-products/{product_id}",
    response_model=CustomProductResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def get_custom_product(
    product_id: str,
    user_id: str,
    use_case: GetCustomProductUseCase = Depends(get_get_custom_product_use_case)
):
    try:
        product = await use_case(user_id, product_id)
        return CustomProductResponse.from_domain(product)
    except CustomProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Нет доступа к товару")


@router.get("/custom-products", response_model=List[CustomProductResponse])
async def list_custom_products(
    user_id: str,
    use_case: ListCustomProductsUseCase = Depends(get_list_custom_products_use_case)
):
    """Товары пользователя, новые первыми"""
    products = await use_case(user_id)
    return [CustomProductResponse.from_domain(product) for product in products]


@router.patch(
    "/custom-products/{product_id}",
    response_model=CustomProductResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def update_custom_product(
    product_id: str,
    user_id: str,
    request: UpdateCustomProductRequest,
    use_case: UpdateCustomProductUseCase = Depends(get_update_custom_product_use_case)
):
    try:
        product = await use_case(
            user_id, product_id, UpdateCustomProductDTO(**request.model_dump(exclude_unset=True))
        )
        return CustomProductResponse.from_domain(product)
    except CustomProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Нет доступа к товару")


@router.delete(
    "/custom-products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)
async def delete_custom_product(
    product_id: str,
    user_id: str,
    use_case: DeleteCustomProductUseCase = Depends(get_delete_custom_product_use_case)
):
    try:
        await use_case(user_id, product_id)
    except CustomProductNotFoundError:
        raise HTTPException(status_code=404, detail="Товар не найден")
    except AccessDeniedError:
        raise HTTPException(status_code=403, detail="Нет доступа к товару")
