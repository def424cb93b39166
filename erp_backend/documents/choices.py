# documents/choices.py

"""
Shared vocabulary for lifecycle documents.

Values are stored in the database and travel over the API,
so they must stay stable.
"""

from django.db import models


class DocumentKind(models.TextChoices):
    SALE = "sale", "Sale"
    PURCHASE = "purchase", "Purchase"
    TRANSFER = "transfer", "Transfer"


class DocumentState(models.TextChoices):
    # sale chain
    PENDING = "pending", "Pending"
    PREPARING = "preparing", "Preparing"
    IN_TRANSIT = "in_transit", "In transit"
    DELIVERED = "delivered", "Delivered"

    # purchase chain
    DISPATCHED = "dispatched", "Dispatched"
    LOADING = "loading", "Loading"
    RETURNING = "returning", "Returning"

    # shared terminals
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class SignerRole(models.TextChoices):
    CLIENTE = "cliente", "Cliente"
    CONDUCTOR = "conductor", "Conductor"
    ENCARGADO = "encargado", "Encargado"
    PROVEEDOR = "proveedor", "Proveedor"


class DeliveryType(models.TextChoices):
    CUSTOMER_PICKUP = "customer_pickup", "Customer pickup"
    OWN_FREIGHT = "own_freight", "Own freight"
    EXTERNAL_FREIGHT = "external_freight", "External freight"


class PurchaseType(models.TextChoices):
    PARCELA = "parcela", "Parcela (field)"
    PLANTA = "planta", "Planta (plant)"
