"""Per-block inflation and minting: types, keeper, module and simulation helpers."""