# hubchain

`hubchain` holds two state modules of a proof-of-stake ledger, written as
plain Python over an in-memory key/value store:

- **guardian** – a registry of privileged "super" accounts. Genesis supers can
  add and remove ordinary supers. Genesis supers themselves cannot be removed.
- **mint** – block inflation. Every block after the first mints
  `inflation × inflation_base / blocks_per_year` of the mint denom and sends
  the minted coins to the fee collector module account.

`hubchain.sdk` brings the small set of ledger primitives these modules need:
bech32 account addresses (`AccAddress`), fixed-point decimals (`Dec`), coins
(`Coin`, `Coins`), events (`Event`, `EventManager`), a prefix-iterable store
(`KVStore`), an execution `Context` and a `Bank` of balances and module
accounts.

## Install

```
pip install .
pip install ".[test]"   # with pytest for the test suite
```

## Guardian

```python
from hubchain.sdk import AccAddress, Context
from hubchain.guardian.types import AccountType, Super, MsgAddSuper
from hubchain.guardian.keeper import GuardianKeeper, MsgServer

ctx = Context()
keeper = GuardianKeeper()

root = AccAddress.from_hex("0A367B92CF0B037DFD89960EE832D56F7FC15168")
other = AccAddress.module_address("example")

keeper.add_super(ctx, Super.create("root", AccountType.GENESIS, root, root))

server = MsgServer(keeper)
server.add_super(ctx, MsgAddSuper.create("operator", other, root))

print([s.description for s in keeper.iter_supers(ctx)])
print(ctx.event_manager.events)
```

Messages check themselves with `validate_basic()`; `sign_bytes()` gives the
sorted amino JSON that would be signed and `signers()` the signing addresses.
When a rule is broken the call raises an error from `hubchain.errors`, for
example `InvalidAddressError`, `UnknownOperatorError`, `SuperExistsError`,
`UnknownSuperError` or `DeleteGenesisSuperError`.

`GuardianKeeper.supers(ctx, limit, offset)` returns a page of supers with the
key of the next page and the total count. `hubchain.guardian.keeper.query`
answers the `["supers"]` query path with indented JSON.

`hubchain.guardian.module` has `init_genesis`, `export_genesis`,
`validate_genesis` and `new_handler`; `GuardianModule` bundles the genesis
handling, the message routing (`handle`, which returns the emitted events) and
the query path (`query`).

## Mint

```python
from hubchain.sdk import Bank, Context
from hubchain.mint.types import Minter, Params
from hubchain.mint.keeper import MintKeeper
from hubchain.mint.module import begin_blocker

print(Minter.default().block_provision(Params.default()))  # 4% of the bond denom

bank = Bank({"mint": ["minter"], "fee_collector": None})
keeper = MintKeeper(bank)

ctx = Context(block_height=2)
keeper.set_minter(ctx, Minter.default())
keeper.set_params(ctx, Params.default())

begin_blocker(ctx, keeper)
print(bank.balances(bank.module_address("fee_collector")))
```

`MintKeeper` needs a bank that has a `mint` module account with the minter
permission; it stores the minter and the parameters, mints through the bank
and pays the fee collector. `Params.validate()` keeps inflation within
`[0, 0.2]`. `hubchain.mint.module` provides `begin_blocker`, genesis import,
export and validation, and `MintModule`. `hubchain.mint.simulation` has
`randomized_gen_state`, `param_changes`, `gen_inflation` and the store decoder
from `new_decode_store`.

## What it does not do

Everything lives in memory for the life of a `Context`: there is no database
or on-disk storage. There is no command-line tool, no REST or gRPC server and
no transaction signing or signature checking; messages are passed straight to
`MsgServer` or a module's `handle`.

## Tests

```
pytest
```