from excel_primes.main import run

run()
