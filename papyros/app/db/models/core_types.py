import enum


class MovementKind(str, enum.Enum):
    entrada = "ENTRADA"
    salida = "SALIDA"
    ajuste = "AJUSTE"


class POStatus(str, enum.Enum):
    emitida = "EMITIDA"
    cerrada = "CERRADA"
    anulada = "ANULADA"


class PaymentMethod(str, enum.Enum):
    efectivo = "EFECTIVO"
    tarjeta = "TARJETA"
    transferencia = "TRANSFERENCIA"
    otro = "OTRO"


# Sale.status is a free string column; these are the values the engine writes.
SALE_STATUS_CONFIRMED = "CONFIRMADA"
