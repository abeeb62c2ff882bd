#!/usr/bin/env python3
import sys
import os
import time
from decimal import Decimal

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from transaction_engine import TransactionEngine
from models import TransactionRecord, TransactionType

NUM_CLIENTS = 1000
DEPOSITS_PER_CLIENT = 100

# Generate test data: every client deposits 1.0001 a hundred times, withdraws
# half of it back, and disputes then resolves its first deposit.
records = []
tx = 1
for client in range(1, NUM_CLIENTS + 1):
    first_tx = tx
    for _ in range(DEPOSITS_PER_CLIENT):
        records.append(TransactionRecord(
            transaction_type=TransactionType.DEPOSIT, client=client, tx=tx, amount=Decimal('1.0001')
        ))
        tx += 1
    records.append(TransactionRecord(
        transaction_type=TransactionType.WITHDRAWAL, client=client, tx=tx, amount=Decimal('50.005')
    ))
    tx += 1
    records.append(TransactionRecord(transaction_type=TransactionType.DISPUTE, client=client, tx=first_tx))
    records.append(TransactionRecord(transaction_type=TransactionType.RESOLVE, client=client, tx=first_tx))

# Performance test
start_time = time.time()
engine = TransactionEngine()
summary = engine.process(records)
report = engine.ledger.serialize()
duration = time.time() - start_time

print(f'Processed {summary.records_read:,} records in {duration:.2f} seconds')
assert duration < 30, f'Performance test failed: {duration:.2f}s > 30s'
assert summary.records_applied == len(records), f'Expected every record applied, got {summary.records_dropped}'
for account in engine.ledger.accounts():
    assert account.total == account.available + account.held
    assert account.available == Decimal('50.005'), f'Client {account.client}: {account.available}'
assert report.count('\n') == NUM_CLIENTS + 1
print('Performance test passed')
