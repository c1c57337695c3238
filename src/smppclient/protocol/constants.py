"""
SMPP v3.4 Protocol Constants and Enumerations

Command ids, status codes, address classification values, data codings,
esm_class bits and optional parameter tags used by the ESME session engine.
"""

from enum import IntEnum
from typing import Dict


class CommandId(IntEnum):
    """SMPP Command IDs (SMPP v3.4 section 5)"""

    GENERIC_NACK = 0x80000000
    BIND_RECEIVER = 0x00000001
    BIND_RECEIVER_RESP = 0x80000001
    BIND_TRANSMITTER = 0x00000002
    BIND_TRANSMITTER_RESP = 0x80000002
    QUERY_SM = 0x00000003
    QUERY_SM_RESP = 0x80000003
    SUBMIT_SM = 0x00000004
    SUBMIT_SM_RESP = 0x80000004
    DELIVER_SM = 0x00000005
    DELIVER_SM_RESP = 0x80000005
    UNBIND = 0x00000006
    UNBIND_RESP = 0x80000006
    REPLACE_SM = 0x00000007
    REPLACE_SM_RESP = 0x80000007
    CANCEL_SM = 0x00000008
    CANCEL_SM_RESP = 0x80000008
    BIND_TRANSCEIVER = 0x00000009
    BIND_TRANSCEIVER_RESP = 0x80000009
    OUTBIND = 0x0000000B
    ENQUIRE_LINK = 0x00000015
    ENQUIRE_LINK_RESP = 0x80000015
    SUBMIT_MULTI = 0x00000021
    SUBMIT_MULTI_RESP = 0x80000021
    ALERT_NOTIFICATION = 0x00000102
    DATA_SM = 0x00000103
    DATA_SM_RESP = 0x80000103


class CommandStatus(IntEnum):
    """SMPP Command Status codes (SMPP v3.4 section 5)"""

    ESME_ROK = 0x00000000
    ESME_RINVMSGLEN = 0x00000001
    ESME_RINVCMDLEN = 0x00000002
    ESME_RINVCMDID = 0x00000003
    ESME_RINVBNDSTS = 0x00000004
    ESME_RALYBND = 0x00000005
    ESME_RINVPRTFLG = 0x00000006
    ESME_RINVREGDLVFLG = 0x00000007
    ESME_RSYSERR = 0x00000008
    ESME_RINVSRCADR = 0x0000000A
    ESME_RINVDSTADR = 0x0000000B
    ESME_RINVMSGID = 0x0000000C
    ESME_RBINDFAIL = 0x0000000D
    ESME_RINVPASWD = 0x0000000E
    ESME_RINVSYSID = 0x0000000F
    ESME_RCANCELFAIL = 0x00000011
    ESME_RREPLACEFAIL = 0x00000013
    ESME_RMSGQFUL = 0x00000014
    ESME_RINVSERTYP = 0x00000015
    ESME_RINVNUMDESTS = 0x00000033
    ESME_RINVDLNAME = 0x00000034
    ESME_RINVDESTFLAG = 0x00000040
    ESME_RINVSUBREP = 0x00000042
    ESME_RINVESMCLASS = 0x00000043
    ESME_RCNTSUBDL = 0x00000044
    ESME_RSUBMITFAIL = 0x00000045
    ESME_RINVSRCTON = 0x00000048
    ESME_RINVSRCNPI = 0x00000049
    ESME_RINVDSTTON = 0x00000050
    ESME_RINVDSTNPI = 0x00000051
    ESME_RINVSYSTYP = 0x00000053
    ESME_RINVREPFLAG = 0x00000054
    ESME_RINVNUMMSGS = 0x00000055
    ESME_RTHROTTLED = 0x00000058
    ESME_RINVSCHED = 0x00000061
    ESME_RINVEXPIRY = 0x00000062
    ESME_RINVDFTMSGID = 0x00000063
    ESME_RX_T_APPN = 0x00000064
    ESME_RX_P_APPN = 0x00000065
    ESME_RX_R_APPN = 0x00000066
    ESME_RQUERYFAIL = 0x00000067
    ESME_RINVOPTPARSTREAM = 0x000000C0
    ESME_ROPTPARNOTALLWD = 0x000000C1
    ESME_RINVPARLEN = 0x000000C2
    ESME_RMISSINGOPTPARAM = 0x000000C3
    ESME_RINVOPTPARAMVAL = 0x000000C4
    ESME_RDELIVERYFAILURE = 0x000000FE
    ESME_RUNKNOWNERR = 0x000000FF


class TonType(IntEnum):
    """Type of Number (TON) values"""

    UNKNOWN = 0x00
    INTERNATIONAL = 0x01
    NATIONAL = 0x02
    NETWORK_SPECIFIC = 0x03
    SUBSCRIBER = 0x04
    ALPHANUMERIC = 0x05
    ABBREVIATED = 0x06


class NpiType(IntEnum):
    """Numbering Plan Indicator (NPI) values"""

    UNKNOWN = 0x00
    ISDN = 0x01
    DATA = 0x03
    TELEX = 0x04
    LAND_MOBILE = 0x06
    NATIONAL = 0x08
    PRIVATE = 0x09
    ERMES = 0x0A
    INTERNET = 0x0E
    WAP_CLIENT_ID = 0x12


class DataCoding(IntEnum):
    """Data Coding Scheme values"""

    DEFAULT = 0x00  # SMSC Default Alphabet (GSM 03.38)
    IA5_ASCII = 0x01
    BINARY = 0x02
    LATIN_1 = 0x03
    BINARY_2 = 0x04
    JIS = 0x05
    CYRILLIC = 0x06
    LATIN_HEBREW = 0x07
    UCS2 = 0x08
    PICTOGRAM = 0x09
    ISO_2022_JP = 0x0A
    EXTENDED_KANJI_JIS = 0x0D
    KS_C_5601 = 0x0E


class EsmClass(IntEnum):
    """esm_class bits relevant to submit_sm and deliver_sm"""

    DEFAULT = 0x00
    DATAGRAM = 0x01
    FORWARD = 0x02
    STORE_FORWARD = 0x03
    # deliver_sm message types
    SMSC_DELIVERY_RECEIPT = 0x04
    SME_DELIVERY_ACK = 0x08
    SME_MANUAL_ACK = 0x10
    CONVERSATION_ABORT = 0x18
    INTERMEDIATE_NOTIFICATION = 0x20
    # GSM network features
    UDHI_INDICATOR = 0x40
    REPLY_PATH = 0x80


class PriorityFlag(IntEnum):
    """Priority Flag values"""

    LEVEL_0 = 0x00
    LEVEL_1 = 0x01
    LEVEL_2 = 0x02
    LEVEL_3 = 0x03


class RegisteredDelivery(IntEnum):
    """Registered Delivery values"""

    NO_RECEIPT = 0x00
    SMSC_BOTH = 0x01  # success or failure
    SMSC_FAILURE = 0x02
    SME_DELIVERY_ACK = 0x04
    SME_MANUAL_ACK = 0x08
    SME_BOTH_ACK = 0x0C
    INTERMEDIATE_NOTIFICATION = 0x10


class ReplaceIfPresentFlag(IntEnum):
    """Replace If Present Flag values"""

    DONT_REPLACE = 0x00
    REPLACE = 0x01


class InterfaceVersion(IntEnum):
    """Interface Version values"""

    VERSION_3_3 = 0x33
    VERSION_3_4 = 0x34


class MessageState(IntEnum):
    """message_state values returned by query_sm_resp (section 5.2.28)"""

    ENROUTE = 0x01
    DELIVERED = 0x02
    EXPIRED = 0x03
    DELETED = 0x04
    UNDELIVERABLE = 0x05
    ACCEPTED = 0x06
    UNKNOWN = 0x07
    REJECTED = 0x08


class OptionalTag(IntEnum):
    """Optional Parameter Tags for TLV (Tag-Length-Value) parameters"""

    DEST_ADDR_SUBUNIT = 0x0005
    DEST_NETWORK_TYPE = 0x0006
    DEST_BEARER_TYPE = 0x0007
    DEST_TELEMATICS_ID = 0x0008
    SOURCE_ADDR_SUBUNIT = 0x000D
    SOURCE_NETWORK_TYPE = 0x000E
    SOURCE_BEARER_TYPE = 0x000F
    SOURCE_TELEMATICS_ID = 0x0010
    QOS_TIME_TO_LIVE = 0x0017
    PAYLOAD_TYPE = 0x0019
    ADDITIONAL_STATUS_INFO_TEXT = 0x001D
    RECEIPTED_MESSAGE_ID = 0x001E
    MS_MSG_WAIT_FACILITIES = 0x0030
    PRIVACY_INDICATOR = 0x0201
    SOURCE_SUBADDRESS = 0x0202
    DEST_SUBADDRESS = 0x0203
    USER_MESSAGE_REFERENCE = 0x0204
    USER_RESPONSE_CODE = 0x0205
    SOURCE_PORT = 0x020A
    DESTINATION_PORT = 0x020B
    SAR_MSG_REF_NUM = 0x020C
    LANGUAGE_INDICATOR = 0x020D
    SAR_TOTAL_SEGMENTS = 0x020E
    SAR_SEGMENT_SEQNUM = 0x020F
    SC_INTERFACE_VERSION = 0x0210
    CALLBACK_NUM_PRES_IND = 0x0302
    CALLBACK_NUM_ATAG = 0x0303
    NUMBER_OF_MESSAGES = 0x0304
    CALLBACK_NUM = 0x0381
    DPF_RESULT = 0x0420
    SET_DPF = 0x0421
    MS_AVAILABILITY_STATUS = 0x0422
    NETWORK_ERROR_CODE = 0x0423
    MESSAGE_PAYLOAD = 0x0424
    DELIVERY_FAILURE_REASON = 0x0425
    MORE_MESSAGES_TO_SEND = 0x0426
    MESSAGE_STATE = 0x0427
    USSD_SERVICE_OP = 0x0501
    DISPLAY_TIME = 0x1201
    SMS_SIGNAL = 0x1203
    MS_VALIDITY = 0x1204
    ALERT_ON_MESSAGE_DELIVERY = 0x130C
    ITS_REPLY_TYPE = 0x1380
    ITS_SESSION_INFO = 0x1383


# Default bind parameters
DEFAULT_SYSTEM_TYPE = 'WWW'
DEFAULT_INTERFACE_VERSION = InterfaceVersion.VERSION_3_4
DEFAULT_ADDR_TON = TonType.UNKNOWN
DEFAULT_ADDR_NPI = NpiType.UNKNOWN
DEFAULT_ADDRESS_RANGE = ''

# Default submit_sm parameters
DEFAULT_SERVICE_TYPE = ''
DEFAULT_ESM_CLASS = EsmClass.DEFAULT
DEFAULT_PROTOCOL_ID = 0
DEFAULT_PRIORITY_FLAG = PriorityFlag.LEVEL_0
DEFAULT_REGISTERED_DELIVERY = RegisteredDelivery.NO_RECEIPT
DEFAULT_REPLACE_IF_PRESENT_FLAG = ReplaceIfPresentFlag.DONT_REPLACE
DEFAULT_DATA_CODING = DataCoding.DEFAULT
DEFAULT_SM_DEFAULT_MSG_ID = 0

# PDU Structure Constants
PDU_HEADER_SIZE = 16
MAX_PDU_SIZE = 65536
MAX_SEQUENCE_NUMBER = 0x7FFFFFFF

# Field widths including the terminating null
MAX_SERVICE_TYPE_LENGTH = 6
MAX_ADDRESS_LENGTH = 21
MAX_TIME_LENGTH = 17
MAX_MESSAGE_ID_LENGTH = 65

# Single-PDU octet limits and CSMS split sizes
GSM_SINGLE_SMS_LIMIT = 160
GSM_CSMS_SPLIT = 152
GSM_CSMS_SPLIT_UDH = 153
UCS2_SINGLE_SMS_LIMIT = 140
UCS2_CSMS_SPLIT = 132
OCTET_SINGLE_SMS_LIMIT = 254

GSM_ESCAPE = 0x1B

ERROR_MESSAGES: Dict[int, str] = {
    CommandStatus.ESME_ROK: 'No Error',
    CommandStatus.ESME_RINVMSGLEN: 'Message Length is invalid',
    CommandStatus.ESME_RINVCMDLEN: 'Command Length is invalid',
    CommandStatus.ESME_RINVCMDID: 'Invalid Command ID',
    CommandStatus.ESME_RINVBNDSTS: 'Incorrect BIND Status for given command',
    CommandStatus.ESME_RALYBND: 'ESME Already in Bound State',
    CommandStatus.ESME_RINVPRTFLG: 'Invalid Priority Flag',
    CommandStatus.ESME_RINVREGDLVFLG: 'Invalid Registered Delivery Flag',
    CommandStatus.ESME_RSYSERR: 'System Error',
    CommandStatus.ESME_RINVSRCADR: 'Invalid Source Address',
    CommandStatus.ESME_RINVDSTADR: 'Invalid Dest Addr',
    CommandStatus.ESME_RINVMSGID: 'Message ID is invalid',
    CommandStatus.ESME_RBINDFAIL: 'Bind Failed',
    CommandStatus.ESME_RINVPASWD: 'Invalid Password',
    CommandStatus.ESME_RINVSYSID: 'Invalid System ID',
    CommandStatus.ESME_RCANCELFAIL: 'Cancel SM Failed',
    CommandStatus.ESME_RREPLACEFAIL: 'Replace SM Failed',
    CommandStatus.ESME_RMSGQFUL: 'Message Queue Full',
    CommandStatus.ESME_RINVSERTYP: 'Invalid Service Type',
    CommandStatus.ESME_RINVNUMDESTS: 'Invalid number of destinations',
    CommandStatus.ESME_RINVDLNAME: 'Invalid Distribution List name',
    CommandStatus.ESME_RINVDESTFLAG: 'Destination flag is invalid',
    CommandStatus.ESME_RINVSUBREP: "Invalid 'submit with replace' request",
    CommandStatus.ESME_RINVESMCLASS: 'Invalid esm_class field data',
    CommandStatus.ESME_RCNTSUBDL: 'Cannot Submit to Distribution List',
    CommandStatus.ESME_RSUBMITFAIL: 'submit_sm or submit_multi failed',
    CommandStatus.ESME_RINVSRCTON: 'Invalid Source address TON',
    CommandStatus.ESME_RINVSRCNPI: 'Invalid Source address NPI',
    CommandStatus.ESME_RINVDSTTON: 'Invalid Destination address TON',
    CommandStatus.ESME_RINVDSTNPI: 'Invalid Destination address NPI',
    CommandStatus.ESME_RINVSYSTYP: 'Invalid system_type field',
    CommandStatus.ESME_RINVREPFLAG: 'Invalid replace_if_present flag',
    CommandStatus.ESME_RINVNUMMSGS: 'Invalid number of messages',
    CommandStatus.ESME_RTHROTTLED: 'Throttling error (ESME has exceeded allowed message limits)',
    CommandStatus.ESME_RINVSCHED: 'Invalid Scheduled Delivery Time',
    CommandStatus.ESME_RINVEXPIRY: 'Invalid message validity period (Expiry time)',
    CommandStatus.ESME_RINVDFTMSGID: 'Predefined Message Invalid or Not Found',
    CommandStatus.ESME_RX_T_APPN: 'ESME Receiver Temporary App Error Code',
    CommandStatus.ESME_RX_P_APPN: 'ESME Receiver Permanent App Error Code',
    CommandStatus.ESME_RX_R_APPN: 'ESME Receiver Reject Message Error Code',
    CommandStatus.ESME_RQUERYFAIL: 'query_sm request failed',
    CommandStatus.ESME_RINVOPTPARSTREAM: 'Error in the optional part of the PDU Body',
    CommandStatus.ESME_ROPTPARNOTALLWD: 'Optional Parameter not allowed',
    CommandStatus.ESME_RINVPARLEN: 'Invalid Parameter Length',
    CommandStatus.ESME_RMISSINGOPTPARAM: 'Expected Optional Parameter missing',
    CommandStatus.ESME_RINVOPTPARAMVAL: 'Invalid Optional Parameter Value',
    CommandStatus.ESME_RDELIVERYFAILURE: 'Delivery Failure (used for data_sm_resp)',
    CommandStatus.ESME_RUNKNOWNERR: 'Unknown Error',
}


def get_error_message(status_code: int) -> str:
    """Get human-readable error message for a status code"""
    return ERROR_MESSAGES.get(status_code, f'Unknown error code: 0x{status_code:08X}')


def get_response_command_id(command_id: int) -> int:
    """Get the response command ID for a given request command ID"""
    return command_id | CommandId.GENERIC_NACK
