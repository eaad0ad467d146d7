"""
Tests para el módulo POS (caja del PDV)

Cubren:
- Ciclo de vida de la caja: apertura, cierre con arqueo, inmutabilidad
- Restricción de una sola caja abierta (servicio y base de datos)
- Movimientos manuales y sus validaciones
- Atribución de ventas y rechazo después del cierre
- Resumen: fórmula de saldo esperado, exclusión de canceladas, orden indiferente
- Endpoints REST y traducción de errores de dominio
"""

import pytest
from decimal import Decimal
from datetime import timedelta
from itertools import permutations
from types import SimpleNamespace
from uuid import uuid4

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError

from pdv_api.common.mixins import utcnow
from pdv_api.common.validators import to_money
from pdv_api.core.exceptions import (
    AlreadyClosedError, ClosedRegisterError, ConflictError, NotFoundError,
    TransientStoreError, ValidationError
)
from pdv_api.modules.cart.pricing import DiscountType
from pdv_api.modules.cart.schemas import CartItemIn, CartDiscountIn
from pdv_api.modules.pos.models import CashRegister, Channel, EntryType, PaymentMethod, Sale
from pdv_api.modules.pos.reconciliation import classify_difference, reconcile
from pdv_api.modules.pos.sales import SaleService
from pdv_api.modules.pos.schemas import ReconciliationStatus, SaleSubmission
from pdv_api.modules.pos.services import CashEntryService, CashRegisterService
from pdv_api.modules.pos.summary import calculate_summary


# ===== FIXTURES =====

@pytest.fixture
def register_service(db_session):
    return CashRegisterService(db_session)


@pytest.fixture
def entry_service(db_session):
    return CashEntryService(db_session)


@pytest.fixture
def sale_service(db_session):
    return SaleService(db_session)


@pytest.fixture
def open_register(register_service):
    """Caja abierta con R$ 100,00 de fondo"""
    return register_service.open_register(Decimal("100.00"))


def cash_sale(total, channel=Channel.POS, method=PaymentMethod.CASH, **extra):
    return SaleSubmission(channel=channel, payment_method=method, total_amount=Decimal(total), **extra)


# ===== TESTS DE APERTURA =====

class TestOpenRegister:
    """Tests para la apertura de caja"""

    def test_open_register_success(self, register_service):
        """Test apertura con fondo positivo"""
        register = register_service.open_register(Decimal("100.00"), opening_notes="Turno manhã")

        assert register.id is not None
        assert register.opening_amount == Decimal("100.00")
        assert register.is_open
        assert register.status == "open"
        assert register.closed_at is None
        assert register.open_slot is True
        assert register_service.get_current_register().id == register.id
        assert register_service.is_open()

    @pytest.mark.parametrize("amount", ["0", "-10", "abc"])
    def test_open_register_invalid_amount(self, register_service, amount):
        """Test fondo no positivo o no numérico"""
        with pytest.raises(ValidationError):
            register_service.open_register(amount)

        assert register_service.get_current_register() is None

    def test_second_open_conflicts(self, register_service, open_register):
        """Test no se puede abrir una segunda caja"""
        with pytest.raises(ConflictError):
            register_service.open_register(Decimal("50.00"))

        assert register_service.get_current_register().id == open_register.id

    def test_lost_race_is_conflict(self, register_service, open_register, monkeypatch):
        """Test carrera: el chequeo previo no ve la caja, la restricción única la rechaza"""
        monkeypatch.setattr(CashRegisterService, "get_current_register", lambda self: None)

        with pytest.raises(ConflictError):
            register_service.open_register(Decimal("50.00"))

        monkeypatch.undo()
        assert register_service.db.query(CashRegister).count() == 1

    def test_unique_open_slot_in_database(self, db_session, open_register):
        """Test la base rechaza una segunda fila abierta aunque se salte el servicio"""
        db_session.add(CashRegister(opening_amount=Decimal("10.00"), opened_at=utcnow(), open_slot=True))

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_open_after_close(self, register_service, open_register):
        """Test al cerrar se libera el lugar para una nueva caja"""
        register_service.close_register(open_register.id, Decimal("100.00"))

        second = register_service.open_register(Decimal("80.00"))

        assert second.id != open_register.id
        assert register_service.get_current_register().id == second.id


# ===== TESTS DE MOVIMIENTOS =====

class TestCashEntries:
    """Tests para movimientos manuales"""

    def test_add_income_and_expense(self, entry_service, open_register):
        income = entry_service.add_entry(open_register.id, EntryType.INCOME, "50", "  Reforço de troco  ")
        expense = entry_service.add_entry(open_register.id, EntryType.EXPENSE, Decimal("20"), "Sangria")

        assert income.amount == Decimal("50.00")
        assert income.description == "Reforço de troco"
        assert income.payment_method == PaymentMethod.CASH
        assert expense.type == EntryType.EXPENSE

        entries = entry_service.list_entries(open_register.id)
        assert {entry.id for entry in entries} == {income.id, expense.id}

    @pytest.mark.parametrize("amount", ["0", "-5", "0.001"])
    def test_non_positive_amount_rejected(self, entry_service, open_register, amount):
        """Test montos que no llegan a un centavo positivo"""
        with pytest.raises(ValidationError):
            entry_service.add_entry(open_register.id, EntryType.INCOME, amount, "Ajuste")

        assert entry_service.list_entries(open_register.id) == []

    def test_empty_description_rejected(self, entry_service, open_register):
        with pytest.raises(ValidationError):
            entry_service.add_entry(open_register.id, EntryType.EXPENSE, "10", "   ")

    def test_entry_on_closed_register(self, register_service, entry_service, open_register):
        """Test caja cerrada no admite movimientos"""
        register_service.close_register(open_register.id, Decimal("100.00"))

        with pytest.raises(ClosedRegisterError):
            entry_service.add_entry(open_register.id, EntryType.INCOME, "10", "Tarde demais")

    def test_entry_on_unknown_register(self, entry_service):
        with pytest.raises(NotFoundError):
            entry_service.add_entry(uuid4(), EntryType.INCOME, "10", "Caixa inexistente")


# ===== TESTS DE VENTAS =====

class TestSales:
    """Tests para atribución y cancelación de ventas"""

    def test_sale_attributed_to_open_register(self, sale_service, open_register):
        sale = sale_service.commit_sale(cash_sale("30.00"))

        assert sale.register_id == open_register.id
        assert sale.total_amount == Decimal("30.00")
        assert sale.channel == Channel.POS
        assert sale.sale_number == 1
        assert sale_service.commit_sale(cash_sale("5.00")).sale_number == 2

    def test_sale_without_open_register(self, sale_service):
        """Test no hay caja abierta: la venta se rechaza"""
        with pytest.raises(ClosedRegisterError):
            sale_service.commit_sale(cash_sale("30.00"))

    def test_sale_after_close_rejected(self, register_service, sale_service, open_register):
        """Test venta que llega después del cierre no entra en la caja cerrada"""
        register_service.close_register(open_register.id, Decimal("100.00"))

        with pytest.raises(ClosedRegisterError):
            sale_service.commit_sale(cash_sale("30.00"))
        with pytest.raises(ClosedRegisterError):
            sale_service.commit_sale(cash_sale("30.00", register_id=open_register.id))

        assert register_service.get_summary(open_register.id).sales_count == 0

    def test_sale_priced_from_catalog(self, sale_service, open_register, acai_kg, copo_500):
        """Test items valorizados en el servidor con vuelto en efectivo"""
        submission = SaleSubmission(
            items=[
                CartItemIn(product_id=acai_kg.id, weight_kg=Decimal("0.3")),
                CartItemIn(product_id=copo_500.id, quantity=1)
            ],
            payment_method=PaymentMethod.CASH,
            amount_received=Decimal("50.00")
        )

        sale = sale_service.commit_sale(submission)

        assert sale.subtotal == Decimal("35.00")
        assert sale.total_amount == Decimal("35.00")
        assert sale.change_amount == Decimal("15.00")
        assert len(sale.items) == 2
        acai_line = next(item for item in sale.items if item.product_id == acai_kg.id)
        assert acai_line.subtotal == Decimal("15.00")
        assert acai_line.unit_price is None

    def test_sale_with_cart_discount(self, sale_service, open_register, copo_500, milkshake):
        submission = SaleSubmission(
            items=[
                CartItemIn(product_id=copo_500.id),
                CartItemIn(product_id=milkshake.id)
            ],
            discount=CartDiscountIn(type=DiscountType.PERCENTAGE, value=Decimal("10")),
            payment_method=PaymentMethod.PIX,
            total_amount=Decimal("45.00")
        )

        sale = sale_service.commit_sale(submission)

        assert sale.discount_amount == Decimal("5.00")
        assert sale.total_amount == Decimal("45.00")

    def test_client_total_mismatch_rejected(self, sale_service, open_register, copo_500):
        """Test el total del cliente nunca reemplaza al calculado"""
        submission = SaleSubmission(
            items=[CartItemIn(product_id=copo_500.id)],
            payment_method=PaymentMethod.CASH,
            total_amount=Decimal("19.00")
        )

        with pytest.raises(ValidationError):
            sale_service.commit_sale(submission)

    def test_insufficient_cash_rejected(self, sale_service, open_register):
        with pytest.raises(ValidationError):
            sale_service.commit_sale(cash_sale("30.00", amount_received=Decimal("20.00")))

    def test_unknown_product_rejected(self, sale_service, open_register, inactive_product):
        submission = SaleSubmission(
            items=[CartItemIn(product_id=inactive_product.id)],
            payment_method=PaymentMethod.CASH
        )

        with pytest.raises(NotFoundError):
            sale_service.commit_sale(submission)

    def test_cancel_sale(self, register_service, sale_service, open_register):
        sale = sale_service.commit_sale(cash_sale("30.00"))

        cancelled = sale_service.cancel_sale(sale.id, "Cliente desistiu")

        assert cancelled.is_cancelled
        assert cancelled.cancel_reason == "Cliente desistiu"
        assert cancelled.cancelled_at is not None

        with pytest.raises(ConflictError):
            sale_service.cancel_sale(sale.id, "De novo")

    def test_cancel_sees_cancellation_made_elsewhere(self, db_session, sale_service, open_register):
        """Test otra transacción ya canceló la venta: la instancia en memoria no manda"""
        sale = sale_service.commit_sale(cash_sale("30.00"))
        db_session.execute(
            update(Sale.__table__).where(Sale.__table__.c.id == sale.id).values(is_cancelled=True)
        )
        assert sale.is_cancelled is False

        with pytest.raises(ConflictError):
            sale_service.cancel_sale(sale.id, "Duplicado")

    def test_weight_persisted_reproduces_subtotal(self, sale_service, open_register, acai_kg):
        """Test el peso se guarda al gramo y el subtotal guardado se recalcula igual"""
        sale = sale_service.commit_sale(SaleSubmission(
            items=[CartItemIn(product_id=acai_kg.id, weight_kg=Decimal("0.3456"))],
            payment_method=PaymentMethod.PIX
        ))

        line = sale.items[0]
        assert line.weight_kg == Decimal("0.346")
        assert line.subtotal == Decimal("17.30")
        assert to_money(line.weight_kg * 1000 * line.price_per_gram) == line.subtotal

    def test_cancel_after_close_rejected(self, register_service, sale_service, open_register):
        """Test caja cerrada es inmutable: sus ventas no se cancelan"""
        sale = sale_service.commit_sale(cash_sale("30.00"))
        register_service.close_register(open_register.id, Decimal("130.00"))

        with pytest.raises(ClosedRegisterError):
            sale_service.cancel_sale(sale.id, "Tarde demais")

    def test_list_sales(self, sale_service, open_register):
        kept = sale_service.commit_sale(cash_sale("10.00"))
        dropped = sale_service.commit_sale(cash_sale("20.00"))
        sale_service.cancel_sale(dropped.id, "Erro de digitação")

        everything = sale_service.list_sales(register_id=open_register.id)
        active = sale_service.list_sales(register_id=open_register.id, include_cancelled=False)

        assert everything["total"] == 2
        assert [sale.id for sale in active["sales"]] == [kept.id]


# ===== TESTS DE RESUMEN =====

class TestSummary:
    """Tests para el cálculo del resumen de caja"""

    def test_expected_balance_formula(self, register_service, entry_service, sale_service, open_register):
        """Test 100 de fondo + 50 entrada + 30 venta - 20 salida = 160"""
        entry_service.add_entry(open_register.id, EntryType.INCOME, "50", "Reforço")
        sale_service.commit_sale(cash_sale("30.00"))
        entry_service.add_entry(open_register.id, EntryType.EXPENSE, "20", "Sangria")

        summary = register_service.get_summary(open_register.id)

        assert summary.expected_balance == Decimal("160.00")
        assert summary.sales_total == Decimal("30.00")
        assert summary.other_income_total == Decimal("50.00")
        assert summary.total_expense == Decimal("20.00")
        assert summary.sales_count == 1
        assert summary.payment_breakdown == {"dinheiro": Decimal("60.00")}

    def test_payment_breakdown_nets_expenses(self, register_service, entry_service, sale_service, open_register):
        """Test salidas restan del medio de pago con que se pagaron"""
        sale_service.commit_sale(cash_sale("40.00", method=PaymentMethod.PIX))
        entry_service.add_entry(open_register.id, EntryType.EXPENSE, "15", "Fornecedor",
                                payment_method=PaymentMethod.PIX)
        entry_service.add_entry(open_register.id, EntryType.EXPENSE, "8", "Gás")

        summary = register_service.get_summary(open_register.id)

        assert summary.payment_breakdown == {
            "dinheiro": Decimal("-8.00"),
            "pix": Decimal("25.00")
        }
        assert summary.total_expense == Decimal("23.00")

    def test_non_cash_outside_drawer(self, register_service, sale_service, open_register):
        """Test pix, cartão y misto cuentan en facturación pero no en el cajón"""
        sale_service.commit_sale(cash_sale("40.00", method=PaymentMethod.PIX))
        sale_service.commit_sale(cash_sale("25.00", method=PaymentMethod.MIXED))
        sale_service.commit_sale(cash_sale("15.00", channel=Channel.DELIVERY, method=PaymentMethod.CREDIT_CARD))

        summary = register_service.get_summary(open_register.id)

        assert summary.expected_balance == Decimal("100.00")
        assert summary.total_all_sales == Decimal("80.00")
        assert summary.delivery_total == Decimal("15.00")
        assert summary.delivery_count == 1
        assert list(summary.payment_breakdown) == ["pix", "cartao_credito", "misto"]

    def test_manual_channel_reported_separately(self, register_service, sale_service, open_register):
        sale_service.commit_sale(cash_sale("12.00", channel=Channel.MANUAL))

        summary = register_service.get_summary(open_register.id)

        assert summary.manual_total == Decimal("12.00")
        assert summary.manual_count == 1
        assert summary.total_all_sales == Decimal("0.00")
        assert summary.expected_balance == Decimal("112.00")

    def test_cancelled_sales_excluded(self, register_service, sale_service, open_register):
        sale = sale_service.commit_sale(cash_sale("30.00"))
        sale_service.commit_sale(cash_sale("10.00"))
        sale_service.cancel_sale(sale.id, "Estorno")

        summary = register_service.get_summary(open_register.id)

        assert summary.sales_total == Decimal("10.00")
        assert summary.sales_count == 1
        assert summary.expected_balance == Decimal("110.00")

    def test_summary_independent_of_order(self):
        """Test el resultado no depende del orden de movimientos y ventas"""
        entries = [
            SimpleNamespace(type=EntryType.INCOME, amount=Decimal("50"), payment_method=PaymentMethod.CASH),
            SimpleNamespace(type=EntryType.EXPENSE, amount=Decimal("20"), payment_method=PaymentMethod.CASH),
            SimpleNamespace(type=EntryType.INCOME, amount=Decimal("7.5"), payment_method=PaymentMethod.PIX),
        ]
        sales = [
            SimpleNamespace(channel=Channel.POS, total_amount=Decimal("30"),
                            payment_method=PaymentMethod.CASH, is_cancelled=False),
            SimpleNamespace(channel=Channel.DELIVERY, total_amount=Decimal("12.35"),
                            payment_method=PaymentMethod.DEBIT_CARD, is_cancelled=False),
            SimpleNamespace(channel=Channel.POS, total_amount=Decimal("99"),
                            payment_method=PaymentMethod.CASH, is_cancelled=True),
        ]

        reference = calculate_summary(Decimal("100"), entries, sales)
        for entries_order in permutations(entries):
            for sales_order in permutations(sales):
                assert calculate_summary(Decimal("100"), entries_order, sales_order) == reference

        assert reference.expected_balance == Decimal("160.00")

    def test_live_summary_matches_full_recalculation(self, db_session, register_service, entry_service,
                                                     sale_service, open_register):
        """Test el resumen en vivo coincide con recalcular sobre todos los registros"""
        entry_service.add_entry(open_register.id, EntryType.INCOME, "5.55", "Troco")
        sale_service.commit_sale(cash_sale("19.90"))
        sale_service.commit_sale(cash_sale("7.10", method=PaymentMethod.VOUCHER))

        live = register_service.get_summary(open_register.id)
        db_session.refresh(open_register)
        full = calculate_summary(open_register.opening_amount, open_register.entries, open_register.sales)

        assert live == full

    def test_transient_read_is_retried(self, register_service, open_register, monkeypatch):
        """Test lectura del resumen reintenta ante un error transitorio"""
        original = CashRegisterService.compute_summary
        calls = {"count": 0}

        def flaky(self, register):
            calls["count"] += 1
            if calls["count"] == 1:
                raise OperationalError("SELECT", {}, Exception("database is locked"))
            return original(self, register)

        monkeypatch.setattr(CashRegisterService, "compute_summary", flaky)

        summary = register_service.get_summary(open_register.id)

        assert summary.expected_balance == Decimal("100.00")
        assert calls["count"] == 2

    def test_transient_read_gives_up(self, register_service, open_register, monkeypatch):
        def broken(self, register):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(CashRegisterService, "compute_summary", broken)

        with pytest.raises(TransientStoreError):
            register_service.get_summary(open_register.id)

    def test_summary_unknown_register(self, register_service):
        with pytest.raises(NotFoundError):
            register_service.get_summary(uuid4())


# ===== TESTS DE CIERRE =====

class TestCloseRegister:
    """Tests para el cierre con arqueo"""

    def test_close_with_shortage(self, register_service, entry_service, sale_service, open_register):
        """Test contado 150 contra esperado 160: faltan 10"""
        entry_service.add_entry(open_register.id, EntryType.INCOME, "50", "Reforço")
        sale_service.commit_sale(cash_sale("30.00"))
        entry_service.add_entry(open_register.id, EntryType.EXPENSE, "20", "Sangria")

        result = register_service.close_register(open_register.id, Decimal("150.00"), "Fim do turno")

        assert result.difference == Decimal("-10.00")
        assert result.status == ReconciliationStatus.SHORTAGE
        assert result.summary.expected_balance == Decimal("160.00")
        assert result.register.status == "closed"
        assert result.register.closing_amount == Decimal("150.00")
        assert result.register.expected_balance == Decimal("160.00")
        assert result.register.difference == Decimal("-10.00")
        assert register_service.get_current_register() is None

    def test_close_exact_and_surplus(self, register_service, open_register):
        exact = register_service.close_register(open_register.id, Decimal("100.00"))
        assert exact.difference == Decimal("0.00")
        assert exact.status == ReconciliationStatus.EXACT

        second = register_service.open_register(Decimal("50.00"))
        surplus = register_service.close_register(second.id, Decimal("52.50"))
        assert surplus.difference == Decimal("2.50")
        assert surplus.status == ReconciliationStatus.SURPLUS

    def test_close_twice(self, register_service, open_register):
        """Test caja cerrada no se vuelve a cerrar ni cambia su arqueo"""
        register_service.close_register(open_register.id, Decimal("90.00"))

        with pytest.raises(AlreadyClosedError):
            register_service.close_register(open_register.id, Decimal("100.00"))

        register = register_service.get_register(open_register.id)
        assert register.closing_amount == Decimal("90.00")

    def test_close_negative_amount(self, register_service, open_register):
        with pytest.raises(ValidationError):
            register_service.close_register(open_register.id, Decimal("-1"))

        assert register_service.get_register(open_register.id).is_open

    def test_close_unknown_register(self, register_service):
        with pytest.raises(NotFoundError):
            register_service.close_register(uuid4(), Decimal("10"))

    def test_zero_count_allowed(self, register_service, open_register):
        result = register_service.close_register(open_register.id, Decimal("0"))

        assert result.difference == Decimal("-100.00")

    def test_reconcile_helpers(self):
        summary = calculate_summary(Decimal("100"), [], [])

        assert reconcile(Decimal("100"), summary) == (Decimal("0.00"), ReconciliationStatus.EXACT)
        assert classify_difference(Decimal("0.01")) == ReconciliationStatus.SURPLUS
        assert classify_difference(Decimal("-0.01")) == ReconciliationStatus.SHORTAGE


# ===== TESTS DE HISTORIAL =====

class TestHistory:
    """Tests para el historial de cajas"""

    def test_list_registers_newest_first(self, register_service, sale_service, open_register):
        sale_service.commit_sale(cash_sale("30.00"))
        register_service.close_register(open_register.id, Decimal("130.00"))
        current = register_service.open_register(Decimal("60.00"))

        result = register_service.list_registers()

        assert result["total"] == 2
        assert [item["register"].id for item in result["cash_registers"]] == [current.id, open_register.id]
        assert result["cash_registers"][1]["summary"].sales_total == Decimal("30.00")
        assert result["cash_registers"][0]["summary"].sales_total == Decimal("0.00")

    def test_list_registers_date_filter(self, register_service, open_register):
        today = utcnow().date()

        assert register_service.list_registers(start_date=today)["total"] == 1
        assert register_service.list_registers(start_date=today + timedelta(days=1))["total"] == 0

    def test_list_registers_invalid_range(self, register_service):
        today = utcnow().date()

        with pytest.raises(ValidationError):
            register_service.list_registers(start_date=today, end_date=today - timedelta(days=1))


# ===== TESTS DE ENDPOINTS =====

class TestCashRegisterAPI:
    """Tests de los endpoints REST de caja y ventas"""

    def test_full_register_flow(self, client):
        response = client.post("/api/v1/cash-registers/open", json={"opening_amount": "100.00"})
        assert response.status_code == 201
        register = response.json()
        assert register["status"] == "open"
        register_id = register["id"]

        status_response = client.get("/api/v1/cash-registers/status")
        assert status_response.json()["is_open"] is True
        assert status_response.json()["register"]["id"] == register_id

        response = client.post(
            f"/api/v1/cash-registers/{register_id}/entries",
            json={"type": "income", "amount": "50.00", "description": "Reforço de troco"}
        )
        assert response.status_code == 201

        response = client.post(
            f"/api/v1/cash-registers/{register_id}/entries",
            json={"type": "expense", "amount": "20.00", "description": "Sangria"}
        )
        assert response.status_code == 201

        response = client.post(
            "/api/v1/sales/",
            json={"payment_method": "dinheiro", "total_amount": "30.00", "amount_received": "50.00"}
        )
        assert response.status_code == 201
        assert Decimal(response.json()["change_amount"]) == Decimal("20.00")

        summary = client.get(f"/api/v1/cash-registers/{register_id}/summary").json()
        assert Decimal(summary["expected_balance"]) == Decimal("160.00")

        response = client.post(f"/api/v1/cash-registers/{register_id}/close", json={"closing_amount": "150.00"})
        assert response.status_code == 200
        result = response.json()
        assert result["status"] == "shortage"
        assert Decimal(result["difference"]) == Decimal("-10.00")
        assert result["register"]["status"] == "closed"

        assert client.get("/api/v1/cash-registers/current").status_code == 404
        assert client.get("/api/v1/cash-registers/status").json()["is_open"] is False

        history = client.get("/api/v1/cash-registers/").json()
        assert history["total"] == 1
        assert Decimal(history["cash_registers"][0]["summary"]["expected_balance"]) == Decimal("160.00")

    def test_second_open_returns_conflict(self, client):
        client.post("/api/v1/cash-registers/open", json={"opening_amount": "100.00"})

        response = client.post("/api/v1/cash-registers/open", json={"opening_amount": "10.00"})

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_open_requires_positive_amount(self, client):
        response = client.post("/api/v1/cash-registers/open", json={"opening_amount": "0"})

        assert response.status_code == 422

    def test_sale_without_register_returns_conflict(self, client):
        response = client.post("/api/v1/sales/", json={"payment_method": "pix", "total_amount": "30.00"})

        assert response.status_code == 409
        assert response.json()["code"] == "closed_register"

    def test_sale_requires_items_or_total(self, client):
        response = client.post("/api/v1/sales/", json={"payment_method": "pix"})

        assert response.status_code == 422

    def test_close_twice_returns_already_closed(self, client):
        register_id = client.post("/api/v1/cash-registers/open", json={"opening_amount": "100.00"}).json()["id"]
        client.post(f"/api/v1/cash-registers/{register_id}/close", json={"closing_amount": "100.00"})

        response = client.post(f"/api/v1/cash-registers/{register_id}/close", json={"closing_amount": "100.00"})

        assert response.status_code == 409
        assert response.json()["code"] == "already_closed"

    def test_unknown_register_returns_not_found(self, client):
        response = client.get(f"/api/v1/cash-registers/{uuid4()}/summary")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_cancel_sale_endpoint(self, client):
        client.post("/api/v1/cash-registers/open", json={"opening_amount": "100.00"})
        sale_id = client.post(
            "/api/v1/sales/", json={"payment_method": "dinheiro", "total_amount": "30.00"}
        ).json()["id"]

        response = client.post(f"/api/v1/sales/{sale_id}/cancel", json={"reason": "Cliente desistiu"})

        assert response.status_code == 200
        assert response.json()["is_cancelled"] is True
        sales = client.get("/api/v1/sales/", params={"include_cancelled": False}).json()
        assert sales["total"] == 0

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Cache-Control"] == "no-store"
