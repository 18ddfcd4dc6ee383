import os
import sys

import pyotp

# Secret from the command line, else from the environment
secret = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("E2E_OTP_SECRET", "")
if not secret:
    print("Error: No secret provided. Pass it as an argument or set E2E_OTP_SECRET.")
    sys.exit(1)

# Generate the current TOTP
totp = pyotp.TOTP(secret)
print(totp.now())
