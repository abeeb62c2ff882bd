#!/usr/bin/env python3
"""
Generate a random transaction CSV for manual runs and load testing.

Disputes only reference deposits or withdrawals of the same client, resolves
and chargebacks only reference open disputes, so most generated rows apply.
"""
import argparse
import random
from decimal import Decimal

TRANSACTION_TYPES = ["deposit", "withdrawal", "dispute", "resolve", "chargeback"]
# Higher weight = more frequent occurrence
TRANSACTION_WEIGHTS = [60, 30, 5, 3, 2]


def random_amount(rng):
    return Decimal(rng.uniform(1.0, 10000.0)).quantize(Decimal('0.0001'))


def generate(output, num_clients, num_transactions, seed=None):
    rng = random.Random(seed)
    retained = {}
    open_disputes = {}
    tx_id = 1

    with open(output, 'w') as f:
        f.write("type,client,tx,amount\n")

        for _ in range(num_transactions):
            tx_type = rng.choices(TRANSACTION_TYPES, weights=TRANSACTION_WEIGHTS, k=1)[0]
            client_id = rng.randint(1, num_clients)
            client_txs = retained.setdefault(client_id, [])
            disputes = open_disputes.setdefault(client_id, [])

            if tx_type in ("deposit", "withdrawal"):
                if tx_type == "withdrawal" and not client_txs:
                    tx_type = "deposit"
                amount = random_amount(rng)
                if tx_type == "withdrawal":
                    # Typically withdraw less than deposited
                    amount = (amount / 2).quantize(Decimal('0.0001'))
                f.write(f"{tx_type},{client_id},{tx_id},{amount}\n")
                client_txs.append(tx_id)
                tx_id += 1

            elif tx_type == "dispute":
                candidates = [tx for tx in client_txs if tx not in disputes]
                if candidates:
                    disputed = rng.choice(candidates)
                    f.write(f"dispute,{client_id},{disputed},\n")
                    disputes.append(disputed)

            elif disputes:
                referenced = disputes.pop(rng.randrange(len(disputes)))
                f.write(f"{tx_type},{client_id},{referenced},\n")

    return tx_id - 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a random transaction CSV.")
    parser.add_argument("output", nargs="?", default="transactions.csv")
    parser.add_argument("--clients", type=int, default=1000)
    parser.add_argument("--transactions", type=int, default=500000)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    written = generate(args.output, args.clients, args.transactions, args.seed)
    print(f"Wrote {written} deposits/withdrawals to {args.output}")
