from .pyjwt_token_signer import PyJWTTokenSigner

__all__ = ["PyJWTTokenSigner"]
