"""ERC20 token contract wrapper"""


class ERC20:
    """Wrapper for ERC20 token reads and call encoding"""

    def __init__(self, manager, address):
        """
        Args:
            manager: Web3Manager instance
            address: Token contract address
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(address, "erc20")
        self._info = None

    @property
    def info(self):
        """Get token info (cached)"""
        if self._info is None:
            self._info = {
                "address": self.address,
                "symbol": self._read_text("symbol", "UNKNOWN"),
                "name": self._read_text("name", "Unknown Token"),
                "decimals": self.contract.functions.decimals().call(),
            }
        return self._info

    def _read_text(self, fn_name, default):
        """Read a string getter, handling tokens (MKR, SAI) that return bytes32"""
        try:
            raw = getattr(self.contract.functions, fn_name)().call()
        except Exception:
            return default
        if isinstance(raw, bytes):
            return raw.rstrip(b"\x00").decode("utf-8")
        return str(raw)

    @property
    def symbol(self):
        return self.info["symbol"]

    @property
    def decimals(self):
        return self.info["decimals"]

    def balance_of(self, address):
        """Get token balance in wei"""
        return self.contract.functions.balanceOf(self.manager.checksum(address)).call()

    def to_wei(self, amount):
        """Convert human amount to wei"""
        return int(amount * (10 ** self.decimals))

    def from_wei(self, amount):
        """Convert wei to human amount"""
        return amount / (10 ** self.decimals)

    def approve_data(self, spender, amount_wei):
        """Calldata for approve(spender, amount), to be forwarded by the wallet"""
        return self.contract.encode_abi(
            "approve", args=[self.manager.checksum(spender), amount_wei]
        )
