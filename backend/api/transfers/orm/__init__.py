from api.transfers.orm.transfer_model import TransferModel

__all__ = ["TransferModel"]
