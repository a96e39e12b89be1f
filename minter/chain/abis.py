"""
Minimal ABIs for the creator factory, creator contract and sale strategies
"""

ROYALTY_CONFIGURATION = {
    "components": [
        {"name": "royaltyMintSchedule", "type": "uint32"},
        {"name": "royaltyBPS", "type": "uint32"},
        {"name": "royaltyRecipient", "type": "address"}
    ],
    "name": "defaultRoyaltyConfiguration",
    "type": "tuple"
}

CREATOR_FACTORY_ABI = [
    {
        "inputs": [
            {"name": "newContractURI", "type": "string"},
            {"name": "name", "type": "string"},
            ROYALTY_CONFIGURATION,
            {"name": "defaultAdmin", "type": "address"},
            {"name": "setupActions", "type": "bytes[]"}
        ],
        "name": "createContractDeterministic",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "newContract", "type": "address"},
            {"indexed": True, "name": "creator", "type": "address"},
            {"indexed": True, "name": "defaultAdmin", "type": "address"},
            {"indexed": False, "name": "contractURI", "type": "string"},
            {"indexed": False, "name": "name", "type": "string"},
            dict(ROYALTY_CONFIGURATION, indexed=False)
        ],
        "name": "SetupNewContract",
        "type": "event"
    }
]

# Creation event: new contract, creator, admin are the three indexed topics
SETUP_NEW_CONTRACT_EVENT = "SetupNewContract(address,address,address,string,string,(uint32,uint32,address))"

# Calls replayed by the factory on the new contract (setup actions)
CREATOR_CONTRACT_ABI = [
    {
        "inputs": [
            {"name": "newURI", "type": "string"},
            {"name": "maxSupply", "type": "uint256"}
        ],
        "name": "setupNewToken",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "user", "type": "address"},
            {"name": "permissionBits", "type": "uint256"}
        ],
        "name": "addPermission",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "salesConfig", "type": "address"},
            {"name": "data", "type": "bytes"}
        ],
        "name": "callSale",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "recipient", "type": "address"},
            {"name": "tokenId", "type": "uint256"},
            {"name": "quantity", "type": "uint256"},
            {"name": "data", "type": "bytes"}
        ],
        "name": "adminMint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

FIXED_PRICE_STRATEGY_ABI = [
    {
        "inputs": [
            {"name": "tokenId", "type": "uint256"},
            {
                "components": [
                    {"name": "saleStart", "type": "uint64"},
                    {"name": "saleEnd", "type": "uint64"},
                    {"name": "maxTokensPerAddress", "type": "uint64"},
                    {"name": "pricePerToken", "type": "uint96"},
                    {"name": "fundsRecipient", "type": "address"}
                ],
                "name": "salesConfig",
                "type": "tuple"
            }
        ],
        "name": "setSale",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

ERC20_MINTER_ABI = [
    {
        "inputs": [
            {"name": "name", "type": "string"},
            {"name": "symbol", "type": "string"},
            {"name": "initialOwner", "type": "address"},
            {"name": "initialSupply", "type": "uint256"},
            {"name": "maxSupply", "type": "uint256"},
            {"name": "saleStart", "type": "uint64"},
            {"name": "saleEnd", "type": "uint64"},
            {"name": "maxTokensPerAddress", "type": "uint64"},
            {"name": "pricePerToken", "type": "uint96"},
            {"name": "fundsRecipient", "type": "address"},
            {"name": "metadataURI", "type": "string"}
        ],
        "name": "createCoin",
        "outputs": [{"name": "tokenContract", "type": "address"}],
        "stateMutability": "payable",
        "type": "function"
    }
]

# First token set up on a fresh creator contract
FIRST_TOKEN_ID = 1
PERMISSION_BIT_MINTER = 2 ** 2
