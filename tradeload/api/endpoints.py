class Peatio:
    ACCOUNT_BALANCES = "/api/v2/account/balances"             # GET (trader): materializes the member
    MARKET_ORDERS = "/api/v2/market/orders"                   # POST (trader): place an order
    DEPOSITS_NEW = "/management_api/v1/deposits/new"          # POST (management multisig)
