"""
Simula um webhook da Meta contra o servidor local.

uso: python simulate_whatsapp.py "quero ver calças" [phone_number_id] [from]
"""
import sys

import requests

url = "http://localhost:8000/webhook/whatsapp"

text = sys.argv[1] if len(sys.argv) > 1 else "oi"
phone_number_id = sys.argv[2] if len(sys.argv) > 2 else "100000000000001"
msg_from = sys.argv[3] if len(sys.argv) > 3 else "5583996353706"

payload = {
    "object": "whatsapp_business_account",
    "entry": [
        {
            "id": "WABA_TEST",
            "changes": [
                {
                    "field": "messages",
                    "value": {
                        "messaging_product": "whatsapp",
                        "metadata": {
                            "display_phone_number": "5583000000000",
                            "phone_number_id": phone_number_id,
                        },
                        "messages": [
                            {
                                "from": msg_from,
                                "id": "wamid.TEST123",
                                "timestamp": "1710000000",
                                "type": "text",
                                "text": {"body": text},
                            }
                        ],
                    },
                }
            ],
        }
    ],
}

resp = requests.post(url, json=payload, timeout=30)
print(resp.status_code)
print(resp.text)
