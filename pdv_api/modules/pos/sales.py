"""
Atribución de ventas a la caja abierta

Toda venta confirmada (PDV, delivery o pedido manual) se estampa con la caja
abierta en la misma transacción que la crea. Si no hay caja abierta, o la
caja indicada ya cerró, la venta se rechaza: nunca queda huérfana.
"""

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc, func
from typing import Any, Dict, Optional
from uuid import UUID
import logging

from pdv_api.common.mixins import utcnow
from pdv_api.common.validators import clean_description, to_money, validate_positive_amount
from pdv_api.core.exceptions import ClosedRegisterError, ConflictError, NotFoundError, ValidationError
from pdv_api.database.database import atomic
from pdv_api.modules.cart.service import CartService
from pdv_api.modules.notifications.service import RegisterEvent, notify
from pdv_api.modules.pos.models import CashRegister, PaymentMethod, Sale, SaleItem
from pdv_api.modules.pos.schemas import SaleSubmission
from pdv_api.modules.pos.services import CashRegisterService

logger = logging.getLogger(__name__)


class SaleService:
    """Servicio de confirmación y cancelación de ventas"""

    def __init__(self, db: Session):
        self.db = db
        self.registers = CashRegisterService(db)

    def commit_sale(self, submission: SaleSubmission) -> Sale:
        """
        Confirmar venta y atribuirla a la caja abierta.

        - Con items: se valoriza con el catálogo; un total_amount enviado por
          el cliente debe coincidir con el calculado
        - Sin items: se usa total_amount (debe ser > 0)
        - Efectivo con amount_received: se calcula el vuelto

        Raises:
            ClosedRegisterError: no hay caja abierta o la caja indicada cerró
            NotFoundError: producto o caja inexistente
            ValidationError: totales inconsistentes o efectivo insuficiente
        """
        with atomic(self.db):
            register = self._lock_target_register(submission.register_id)

            if submission.items:
                cart = CartService(self.db).build_cart(submission.items, submission.discount)
                subtotal = cart.subtotal
                discount_amount = cart.discount_amount
                discount_percentage = cart.discount_percentage
                total = cart.total
                if submission.total_amount is not None and to_money(submission.total_amount) != total:
                    raise ValidationError(
                        f"El total informado ({to_money(submission.total_amount)}) no coincide "
                        f"con el total calculado ({total})"
                    )
            else:
                cart = None
                total = to_money(validate_positive_amount(submission.total_amount, "total_amount"))
                subtotal = total
                discount_amount = to_money(0)
                discount_percentage = to_money(0)

            amount_received = None
            change_amount = to_money(0)
            if submission.payment_method == PaymentMethod.CASH and submission.amount_received is not None:
                amount_received = to_money(submission.amount_received)
                if amount_received < total:
                    raise ValidationError(
                        f"Efectivo recibido ({amount_received}) menor al total de la venta ({total})"
                    )
                change_amount = amount_received - total

            sale = Sale(
                sale_number=self._next_sale_number(),
                channel=submission.channel,
                register_id=register.id,
                operator_id=submission.operator_id,
                customer_name=submission.customer_name,
                customer_phone=submission.customer_phone,
                subtotal=subtotal,
                discount_amount=discount_amount,
                discount_percentage=discount_percentage,
                total_amount=total,
                payment_method=submission.payment_method,
                amount_received=amount_received,
                change_amount=change_amount,
                notes=submission.notes,
                is_cancelled=False,
                created_at=utcnow()
            )

            if cart is not None:
                for item in cart.items:
                    product = item.product
                    sale.items.append(SaleItem(
                        product_id=product.id,
                        product_code=product.code,
                        product_name=product.name,
                        quantity=item.quantity,
                        weight_kg=item.weight,
                        unit_price=None if product.is_weighable else product.unit_price,
                        price_per_gram=product.price_per_gram if product.is_weighable else None,
                        discount_amount=item.discount,
                        subtotal=item.subtotal
                    ))

            self.db.add(sale)

        self.db.refresh(sale)
        logger.info(
            f"Sale #{sale.sale_number} ({sale.channel.value}, {sale.payment_method.value}) "
            f"total={sale.total_amount} attributed to register {sale.register_id}"
        )
        notify(RegisterEvent.SALE_COMMITTED, {
            "register_id": str(sale.register_id),
            "sale_id": str(sale.id),
            "channel": sale.channel.value,
            "total_amount": str(sale.total_amount)
        })
        return sale

    def cancel_sale(self, sale_id: UUID, reason: str) -> Sale:
        """
        Cancelar venta. Solo mientras su caja siga abierta: una caja cerrada
        es inmutable.
        """
        text = clean_description(reason, "reason")

        with atomic(self.db):
            sale = self._get_sale(sale_id)
            if sale.register_id is not None:
                register = self.registers.get_register(sale.register_id, lock=True)
                if not register.is_open:
                    raise ClosedRegisterError(
                        f"La venta {sale_id} pertenece a una caja cerrada y no puede cancelarse"
                    )

            # populate_existing: la instancia cargada antes del bloqueo puede estar vieja
            sale = self.db.query(Sale).filter(
                Sale.id == sale_id
            ).with_for_update().populate_existing().first()
            if sale.is_cancelled:
                raise ConflictError(f"La venta {sale_id} ya está cancelada")

            sale.is_cancelled = True
            sale.cancelled_at = utcnow()
            sale.cancel_reason = text

        self.db.refresh(sale)
        logger.info(f"Sale {sale.id} cancelled: {text}")
        notify(RegisterEvent.SALE_CANCELLED, {
            "register_id": str(sale.register_id) if sale.register_id else None,
            "sale_id": str(sale.id)
        })
        return sale

    def get_sale(self, sale_id: UUID) -> Sale:
        return self._get_sale(sale_id)

    def list_sales(self, register_id: Optional[UUID] = None, include_cancelled: bool = True,
                   limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        query = self.db.query(Sale).options(selectinload(Sale.items))

        if register_id:
            self.registers.get_register(register_id)
            query = query.filter(Sale.register_id == register_id)
        if not include_cancelled:
            query = query.filter(Sale.is_cancelled == False)

        total = query.count()
        sales = query.order_by(desc(Sale.created_at)).offset(offset).limit(limit).all()

        return {
            "sales": sales,
            "total": total,
            "limit": limit,
            "offset": offset
        }

    # ===== HELPERS =====

    def _lock_target_register(self, register_id: Optional[UUID]) -> CashRegister:
        """Bloquea la caja abierta; falla si no hay o si la indicada ya cerró"""
        if register_id is not None:
            register = self.registers.get_register(register_id, lock=True)
            if not register.is_open:
                raise ClosedRegisterError(f"La caja {register_id} está cerrada: no admite ventas")
            return register

        register = self.db.query(CashRegister).filter(
            CashRegister.closed_at.is_(None)
        ).with_for_update().first()
        if register is None:
            raise ClosedRegisterError("No hay caja abierta: no es posible finalizar la venta")
        return register

    def _next_sale_number(self) -> int:
        current = self.db.query(func.max(Sale.sale_number)).scalar()
        return (current or 0) + 1

    def _get_sale(self, sale_id: UUID) -> Sale:
        sale = self.db.query(Sale).options(selectinload(Sale.items)).filter(Sale.id == sale_id).first()
        if not sale:
            raise NotFoundError(f"Venta {sale_id} no encontrada")
        return sale
