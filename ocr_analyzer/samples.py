"""Sample OCR texts of Latvian business documents, for the UI and mock mode."""

from .schemas import DocumentCategory

SAMPLE_INVOICE = """\
SIA Mock Piegādātājs
Reģ. Nr. 40003000001, PVN Nr. LV40003000001
Brīvības iela 1, Rīga

Rēķins Nr. 123
Datums: 15.03.2024.   Apmaksāt līdz: 29.03.2024.

Pircējs: SIA Mock Pircējs, PVN Nr. LV40003000002

Nosaukums                  Daudz.   Cena     Summa
Konsultāciju pakalpojumi   1        100.00   100.00

Summa bez PVN: 100.00
PVN 21%: 21.00
Kopā 121.00 EUR

Banka: Swedbank, Konts: LV00HABA0000000000000
"""

SAMPLE_DELIVERY_NOTE = """\
PAVADZĪME Nr. PZ-0042
Izsniegšanas datums: 15.03.2024.  Piegādes datums: 16.03.2024.

Preču nosūtītājs (Pārdevējs): SIA Mock Noliktava
Preču saņēmējs (Pircējs): SIA Mock Veikals
Pamatojums: rēķina Nr. 123

Prece            Daudzums   Cena   Summa
Kartona kastes   10 gab.    5.00   50.00

PVN 21%: 10.50
Kopā apmaksai: 60.50 EUR
"""

SAMPLE_RECEIPT = """\
SIA Mock Veikals
Kases čeks Nr. 0001-2345
15.03.2024 18:42  Kasiere: Anna

Maize           1 x 1.50    1.50
Piens           2 x 1.065   2.13

KOPĀ EUR        3.63
Samaksāts ar karti
"""

SAMPLES = {
    DocumentCategory.INVOICE: SAMPLE_INVOICE,
    DocumentCategory.DELIVERY_NOTE: SAMPLE_DELIVERY_NOTE,
    DocumentCategory.RECEIPT: SAMPLE_RECEIPT,
}
