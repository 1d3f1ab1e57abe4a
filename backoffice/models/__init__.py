# Import every model so string relationships resolve and Base.metadata is complete
from backoffice.models.unit import Unit
from backoffice.models.currency import Currency
from backoffice.models.warehouse import Warehouse
from backoffice.models.supplier import Supplier
from backoffice.models.product import Product
from backoffice.models.adjustment import Adjustment, AdjustmentItem, AdjustmentType
from backoffice.models.purchase import Purchase, PurchaseItem, PurchaseReturn, PurchaseStatus, PaymentStatus
from backoffice.models.sale import Sale, SaleItem
from backoffice.models.transfer import Transfer, TransferItem
from backoffice.models.quotation import Quotation, QuotationItem
from backoffice.models.log import Log
