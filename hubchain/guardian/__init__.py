"""Registry of privileged super accounts: types, keeper and module."""