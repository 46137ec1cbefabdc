import logging
from supabase import Client
from safebite.modules.companies.schemas import CompanyCreate, CompanyUpdate, CompanyResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_company(self, company_data: CompanyCreate) -> CompanyResponse:
        """Create a new company"""
        try:
            if not company_data.name.strip():
                raise HTTPException(status_code=400, detail="Company name is required")

            result = self.supabase.table("companies").insert(company_data.model_dump()).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create company")

            return CompanyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating company: {e}")
            raise HTTPException(status_code=500, detail="Failed to create company")

    def get_company_by_id(self, company_id: str) -> CompanyResponse:
        """Get company by ID"""
        try:
            result = self.supabase.table("companies")\
                .select("*")\
                .eq("id", company_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Company not found")

            return CompanyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting company {company_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load company")

    def list_companies(
        self,
        company_ids: Optional[List[str]] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[CompanyResponse]:
        """List companies ordered by name, restricted to company_ids unless None (super_user)"""
        try:
            if company_ids is not None and len(company_ids) == 0:
                return []
            query = self.supabase.table("companies").select("*")
            if company_ids is not None:
                query = query.in_("id", company_ids)
            result = query.order("name")\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [CompanyResponse(**company) for company in result.data]
        except Exception as e:
            logger.error(f"Error listing companies: {e}")
            raise HTTPException(status_code=500, detail="Failed to list companies")

    def update_company(self, company_id: str, company_data: CompanyUpdate) -> CompanyResponse:
        """Update company"""
        try:
            update_data = company_data.model_dump(exclude_none=True)
            if "name" in update_data and not update_data["name"].strip():
                raise HTTPException(status_code=400, detail="Company name is required")
            if not update_data:
                return self.get_company_by_id(company_id)

            result = self.supabase.table("companies")\
                .update(update_data)\
                .eq("id", company_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Company not found")

            return CompanyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating company {company_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update company")

    def delete_company(self, company_id: str) -> bool:
        """Delete company (locations and records cascade in the database)"""
        try:
            result = self.supabase.table("companies")\
                .delete()\
                .eq("id", company_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting company {company_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete company")
